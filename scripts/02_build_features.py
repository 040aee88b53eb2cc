#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from tsa_volumes.config import ProjectConfig
from tsa_volumes.features import augment_features, holiday_calendar, prepare_model_table
from tsa_volumes.log import setup_logging
from tsa_volumes.modeling import add_log_target
from tsa_volumes.series import load_dataset


def main() -> None:
    cfg0 = ProjectConfig()
    ap = argparse.ArgumentParser(description='Add calendar + holiday-proximity features to the scraped dataset.')
    ap.add_argument('--dataset', type=str, default=str(cfg0.dataset_out_path), help='Date,Numbers CSV from 01_fetch_volumes.py.')
    ap.add_argument('--out', type=str, default=str(cfg0.features_out_path), help='Output .csv.gz path for the model table.')
    ap.add_argument('--window', type=int, default=cfg0.holiday_window_days, help='Days either side of a holiday that count as "surrounding" it.')
    ap.add_argument('--country', type=str, default=cfg0.holiday_country)
    ap.add_argument('--holidays', type=str, nargs='*', default=None, help='Keep only holidays whose name contains one of these.')
    args = ap.parse_args()

    setup_logging()

    df = prepare_model_table(load_dataset(Path(args.dataset)))

    # one year of padding so dates near Jan 1 / Dec 31 see the neighbouring year's holidays
    years = range(int(df['Date'].dt.year.min()) - 1, int(df['Date'].dt.year.max()) + 2)
    cal = holiday_calendar(years, country=args.country, names=args.holidays)

    table = add_log_target(augment_features(df, cal, window_days=args.window))

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(out, index=False, compression='gzip')
    print(f'Wrote: {out} ({table.shape[0]:,} rows, {len(cal)} holidays)')


if __name__ == '__main__':
    main()
