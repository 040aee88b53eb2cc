from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence, Union

from .errors import DateParseError, NumberParseError, SchemaError

DATE_FORMAT = '%m/%d/%Y'

_NON_NUMERIC = re.compile(r'[^0-9.]')

Count = Union[int, float]


@dataclass(frozen=True)
class Record:
    date: date
    count: Count


def parse_date(text: str, fmt: str = DATE_FORMAT) -> date:
    """Parse ``MM/DD/YYYY``; single-digit month/day (``1/1/2019``) are accepted."""
    try:
        return datetime.strptime(text.strip(), fmt).date()
    except (ValueError, AttributeError) as exc:
        raise DateParseError(f'Unparseable date {text!r} (expected {fmt})') from exc


def format_date(d: date, fmt: str = DATE_FORMAT) -> str:
    return d.strftime(fmt)


def strip_count(text: str) -> str:
    return _NON_NUMERIC.sub('', text)


def parse_count(text: str) -> Count:
    """Keep only ASCII digits and '.', then parse. '1,234,567 passengers' -> 1234567."""
    cleaned = strip_count(text or '')
    if not cleaned:
        raise NumberParseError(f'No digits in count {text!r}')
    try:
        value = float(cleaned)
    except ValueError as exc:
        raise NumberParseError(f'Unparseable count {text!r} (stripped to {cleaned!r})') from exc
    if '.' not in cleaned:
        return int(cleaned)
    return int(value) if value.is_integer() else value


def normalize_row(row: Sequence[str], date_field: int = 0, count_field: int = 1) -> Record:
    needed = max(date_field, count_field) + 1
    if len(row) < needed:
        raise SchemaError(f'Row has {len(row)} field(s), need at least {needed}: {list(row)!r}')
    return Record(date=parse_date(row[date_field]), count=parse_count(row[count_field]))


def reconcile_current_year(row: Sequence[str]) -> list:
    """Cut a current-page row down to ``[date, current-year count]`` by position.

    The live page carries extra comparison columns whose headers and order
    drift; only positions 0 and 1 are trusted, header text is never read.
    """
    if len(row) < 2:
        raise SchemaError(f'Current-year row has {len(row)} field(s), need at least 2: {list(row)!r}')
    return [row[0], row[1]]
