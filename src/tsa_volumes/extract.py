from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup

from .errors import ExtractionError
from .fetch import Document

RawTableRow = List[str]


class TableExtractor:
    """Pull one ``<table>`` out of a page as rows of cell text.

    ``table_index`` picks among the page's tables in document order (0 = first),
    so a page that grows a second table keeps extracting the same one.
    Header rows made only of ``<th>`` cells are skipped. No schema checks
    happen here; a reshaped table still extracts and fails later, in the
    normalizer.
    """

    def __init__(self, table_index: int = 0, parser: str = 'lxml') -> None:
        self.table_index = table_index
        self.parser = parser

    def extract_table(self, doc: Document) -> List[RawTableRow]:
        soup = BeautifulSoup(doc.text, self.parser)
        tables = soup.find_all('table')
        if not tables:
            raise ExtractionError('No <table> element found', url=doc.url)
        if self.table_index >= len(tables):
            raise ExtractionError(
                f'Table index {self.table_index} out of range ({len(tables)} tables on page)',
                url=doc.url,
            )

        table = tables[self.table_index]
        rows: List[RawTableRow] = []
        for tr in table.find_all('tr'):
            if tr.find('td') is None:
                continue
            cells = tr.find_all(['td', 'th'])
            rows.append([c.get_text(strip=True) for c in cells])
        return rows
