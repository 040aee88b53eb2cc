"""
conftest.py: canned TSA pages and a fake fetcher so no test touches the network.
"""
from typing import Dict, List, Sequence

import pytest

from tsa_volumes.errors import FetchError
from tsa_volumes.fetch import Document

BASE_URL = "https://example.test/travel/passenger-volumes"


def make_page(rows: Sequence[Sequence[str]], headers: Sequence[str] = ("Date", "Numbers"), n_tables: int = 1) -> str:
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>\n  {c}  \n</td>" for c in row) + "</tr>" for row in rows
    )
    table = f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    return f"<html><body><h1>TSA checkpoint travel numbers</h1>{table * n_tables}</body></html>"


class FakeFetcher:
    """Serves canned HTML by URL; records the order URLs were requested in."""

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.calls: List[str] = []

    def fetch(self, url: str) -> Document:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError("HTTP 404", status_code=404, url=url)
        return Document(url=url, text=self.pages[url])


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def example_pages() -> Dict[str, str]:
    return {
        f"{BASE_URL}/2019": make_page([("1/1/2019", "1,234"), ("1/2/2019", "2,345")]),
        BASE_URL: make_page(
            [("6/1/2024", "3,456", "3,000")],
            headers=("Date", "2024 Traveler Throughput", "2023 Traveler Throughput"),
        ),
    }


@pytest.fixture
def page():
    return make_page


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
