#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from tsa_volumes.config import ProjectConfig
from tsa_volumes.log import setup_logging
from tsa_volumes.modeling import (
    build_model_zoo,
    default_features,
    evaluate_models,
    fit_holiday_effects,
    make_preprocessor,
    split_by_date,
    split_columns,
)
from tsa_volumes.prediction import fit_and_predict


def main() -> None:
    cfg0 = ProjectConfig()
    ap = argparse.ArgumentParser(description='Fit weekday/holiday effects, compare a few regressors, and write tidy predictions.')
    ap.add_argument('--features', type=str, default=str(cfg0.features_out_path), help='Model table from 02_build_features.py.')
    ap.add_argument('--outdir', type=str, default=str(cfg0.reports_dir))
    ap.add_argument('--test-start', type=str, default=str(cfg0.test_start.date()))
    ap.add_argument('--model', type=str, default='LinearRegression', help='Model name from model zoo for the predictions file.')
    ap.add_argument('--sort-by', type=str, default='test_count_RMSE', help='Column to sort comparison by (ascending).')
    args = ap.parse_args()

    setup_logging()

    df = pd.read_csv(args.features)
    df['Date'] = pd.to_datetime(df['Date'])

    features = default_features()
    df = df.dropna(subset=features + ['y']).copy()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    _, coefs = fit_holiday_effects(df, features=features)
    coefs.to_csv(outdir / 'holiday_effects.csv', index=False)
    print(f"Wrote: {outdir / 'holiday_effects.csv'} ({coefs.shape[0]} terms)")

    train, test = split_by_date(df, pd.Timestamp(args.test_start))
    if train.empty or test.empty:
        raise SystemExit(f'--test-start {args.test_start} leaves an empty split ({len(train)} train / {len(test)} test rows)')

    res = evaluate_models(train=train, test=test, features=features, seed=cfg0.seed, n_jobs=cfg0.n_jobs)
    if args.sort_by in res.columns:
        res = res.sort_values([args.sort_by], ascending=True, na_position='last')
    res.to_csv(outdir / 'model_comparison.csv', index=False)
    print(f"Wrote: {outdir / 'model_comparison.csv'}")

    num_cols, cat_cols = split_columns(features)
    zoo = build_model_zoo(pre=make_preprocessor(num_cols=num_cols, cat_cols=cat_cols), seed=cfg0.seed, n_jobs=cfg0.n_jobs)
    if args.model not in zoo:
        raise SystemExit(f"Unknown model '{args.model}'. Available: {sorted(zoo.keys())}")

    pred = fit_and_predict(zoo[args.model], train=train, test=test, features=features)
    pred.to_csv(outdir / 'pred_train_test.csv.gz', index=False, compression='gzip')
    print(f"Wrote: {outdir / 'pred_train_test.csv.gz'} ({pred.shape[0]:,} rows)")


if __name__ == '__main__':
    main()
