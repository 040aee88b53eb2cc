from __future__ import annotations

from typing import Optional


class PassengerVolumeError(Exception):
    """Base error; carries where in the pipeline things went wrong."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        year: Optional[int] = None,
        row_index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.year = year
        self.row_index = row_index

    def with_context(self, **ctx) -> 'PassengerVolumeError':
        for key in ('url', 'year', 'row_index'):
            if ctx.get(key) is not None:
                setattr(self, key, ctx[key])
        return self

    def __str__(self) -> str:
        where = []
        if self.url is not None:
            where.append(f'url={self.url}')
        if self.year is not None:
            where.append(f'year={self.year}')
        if self.row_index is not None:
            where.append(f'row={self.row_index}')
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class FetchError(PassengerVolumeError):
    def __init__(self, message: str, status_code: Optional[int] = None, **ctx) -> None:
        super().__init__(message, **ctx)
        self.status_code = status_code


class ExtractionError(PassengerVolumeError):
    pass


class RowError(PassengerVolumeError):
    """Malformed row content."""


class DateParseError(RowError):
    pass


class NumberParseError(RowError):
    pass


class SchemaError(RowError):
    pass
