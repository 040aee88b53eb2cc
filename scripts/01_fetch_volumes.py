#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from tsa_volumes.config import ON_ROW_ERROR_CHOICES, ProjectConfig
from tsa_volumes.errors import PassengerVolumeError
from tsa_volumes.extract import TableExtractor
from tsa_volumes.fetch import PageFetcher
from tsa_volumes.log import setup_logging
from tsa_volumes.series import SeriesBuilder, write_dataset

logger = logging.getLogger(__name__)


def main() -> None:
    cfg0 = ProjectConfig()
    ap = argparse.ArgumentParser(description='Scrape TSA checkpoint passenger volumes (archive years + current page) into one Date,Numbers CSV.')
    ap.add_argument('--base-url', type=str, default=cfg0.base_url)
    ap.add_argument('--years', type=int, nargs='+', default=cfg0.years, help='Archive years to fetch, in output order.')
    ap.add_argument('--out', type=str, default=str(cfg0.dataset_out_path))
    ap.add_argument('--timeout', type=float, default=cfg0.timeout_seconds, help='Per-request timeout (seconds).')
    ap.add_argument('--workers', type=int, default=cfg0.max_workers, help='Parallel page fetches (1 = sequential).')
    ap.add_argument('--table-index', type=int, default=cfg0.table_index, help='Which <table> on each page (0 = first).')
    ap.add_argument('--on-row-error', choices=ON_ROW_ERROR_CHOICES, default=cfg0.on_row_error)
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    console = Console()

    cfg = ProjectConfig(
        base_url=args.base_url,
        years=list(args.years),
        dataset_out_path=Path(args.out),
        timeout_seconds=args.timeout,
        max_workers=args.workers,
        table_index=args.table_index,
        on_row_error=args.on_row_error,
    )

    fetcher = PageFetcher(timeout=cfg.timeout_seconds, user_agent=cfg.user_agent)
    builder = SeriesBuilder(
        base_url=cfg.base_url,
        fetcher=fetcher,
        extractor=TableExtractor(table_index=cfg.table_index),
        on_row_error=cfg.on_row_error,
        max_workers=cfg.max_workers,
    )

    try:
        df = builder.build(cfg.years)
    except PassengerVolumeError as exc:
        logger.error('Build failed: %s', exc)
        raise SystemExit(1) from exc
    finally:
        fetcher.close()

    for err in builder.row_errors:
        console.print(f'[yellow]row error[/yellow] {err}')

    if df.empty:
        raise SystemExit('No rows extracted from any page.')

    write_dataset(df, cfg.dataset_out_path)
    console.print(f'Wrote: {cfg.dataset_out_path} ({df.shape[0]:,} rows, {df["Date"].min():%Y-%m-%d} .. {df["Date"].max():%Y-%m-%d})')


if __name__ == '__main__':
    main()
