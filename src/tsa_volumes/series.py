from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from .config import ON_ROW_ERROR_CHOICES
from .errors import PassengerVolumeError, RowError
from .extract import RawTableRow, TableExtractor
from .fetch import PageFetcher
from .normalize import Record, normalize_row, reconcile_current_year

logger = logging.getLogger(__name__)

DATASET_COLUMNS = ['Date', 'Numbers']


@dataclass(frozen=True)
class SourcePage:
    url: str
    year: Optional[int] = None  # None = current (rolling) page

    @property
    def is_current(self) -> bool:
        return self.year is None


def historical_url(base_url: str, year: int) -> str:
    return f"{base_url.rstrip('/')}/{year}"


def source_pages(base_url: str, years: Iterable[int]) -> List[SourcePage]:
    """Historical pages in the order given, then the current page."""
    pages = [SourcePage(url=historical_url(base_url, int(y)), year=int(y)) for y in years]
    pages.append(SourcePage(url=base_url))
    return pages


def records_to_frame(records: List[Record]) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            'Date': pd.to_datetime([r.date for r in records]),
            'Numbers': [r.count for r in records],
        },
        columns=DATASET_COLUMNS,
    )
    if df.empty:
        df['Date'] = pd.to_datetime(df['Date'])
        df['Numbers'] = df['Numbers'].astype('int64')
    return df


class SeriesBuilder:
    """Fetch every source page and stitch the rows into one ``Date, Numbers`` table.

    Rows keep page order; pages keep ``years`` order with the current page
    last. Nothing is sorted or de-duplicated here.

    ``on_row_error`` decides what a malformed row does:
      - ``abort``: raise (default; the whole build fails)
      - ``skip``: log a warning and drop the row
      - ``collect``: drop the row and keep the error in ``row_errors``

    Fetch and extraction errors always abort.
    """

    def __init__(
        self,
        base_url: str = 'https://www.tsa.gov/travel/passenger-volumes',
        fetcher: Optional[PageFetcher] = None,
        extractor: Optional[TableExtractor] = None,
        on_row_error: str = 'abort',
        max_workers: int = 1,
    ) -> None:
        if on_row_error not in ON_ROW_ERROR_CHOICES:
            raise ValueError(f'on_row_error must be one of {ON_ROW_ERROR_CHOICES}, got {on_row_error!r}')
        self.base_url = base_url
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or PageFetcher()
        self.extractor = extractor or TableExtractor()
        self.on_row_error = on_row_error
        self.max_workers = max(1, int(max_workers))
        self.row_errors: List[RowError] = []

    def _load_rows(self, page: SourcePage) -> List[RawTableRow]:
        try:
            doc = self.fetcher.fetch(page.url)
            rows = self.extractor.extract_table(doc)
        except PassengerVolumeError as exc:
            raise exc.with_context(url=page.url, year=page.year)
        logger.info('%s: %d rows', page.url, len(rows))
        return rows

    def _normalize_page(self, page: SourcePage, rows: List[RawTableRow]) -> List[Record]:
        records: List[Record] = []
        for i, row in enumerate(rows):
            try:
                if page.is_current:
                    row = reconcile_current_year(row)
                records.append(normalize_row(row))
            except RowError as exc:
                exc.with_context(url=page.url, year=page.year, row_index=i)
                if self.on_row_error == 'abort':
                    raise
                if self.on_row_error == 'collect':
                    self.row_errors.append(exc)
                else:
                    logger.warning('Skipping row: %s', exc)
        return records

    def _fetch_all(self, pages: List[SourcePage]) -> List[List[RawTableRow]]:
        if self.max_workers == 1:
            return [self._load_rows(p) for p in pages]
        # map() yields in submission order, whatever order the fetches finish in
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self._load_rows, pages))

    def build(self, years: Iterable[int]) -> pd.DataFrame:
        self.row_errors = []
        pages = source_pages(self.base_url, years)
        raw = self._fetch_all(pages)

        records: List[Record] = []
        for page, rows in zip(pages, raw):
            records.extend(self._normalize_page(page, rows))

        df = records_to_frame(records)
        logger.info(
            'Built dataset: %d rows from %d pages (%d row errors)',
            len(df), len(pages), len(self.row_errors),
        )
        return df

    def close(self) -> None:
        """Close the fetcher if this builder created it; an injected one is left to its owner."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> SeriesBuilder:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def write_dataset(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    out = df.copy()
    out['Date'] = pd.to_datetime(out['Date']).dt.strftime('%Y-%m-%d')
    out.to_csv(path, index=False)


def load_dataset(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    missing = set(DATASET_COLUMNS).difference(df.columns)
    if missing:
        raise ValueError(f'{path}: missing required columns: {sorted(missing)}')
    df['Date'] = pd.to_datetime(df['Date'], format='%Y-%m-%d')
    return df[DATASET_COLUMNS + [c for c in df.columns if c not in DATASET_COLUMNS]]
