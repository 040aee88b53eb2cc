"""Tests for tsa_volumes.fetch.PageFetcher."""

import threading
from unittest.mock import Mock, patch

import pytest
import requests

from tsa_volumes.errors import FetchError
from tsa_volumes.fetch import Document, PageFetcher

URL = "https://example.test/travel/passenger-volumes"
Session = requests.Session


def _session(status_code: int = 200, text: str = "<html></html>", side_effect=None) -> Mock:
    session = Mock(spec=Session)
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        resp = Mock()
        resp.status_code = status_code
        resp.text = text
        session.get.return_value = resp
    return session


class TestPageFetcher:
    def test_returns_document(self) -> None:
        fetcher = PageFetcher(session=_session(text="<table></table>"))
        doc = fetcher.fetch(URL)
        assert doc == Document(url=URL, text="<table></table>", status_code=200)

    def test_passes_timeout_and_user_agent(self) -> None:
        session = _session()
        PageFetcher(timeout=5.0, user_agent="ua/1", session=session).fetch(URL)
        session.get.assert_called_once_with(URL, timeout=5.0, headers={"User-Agent": "ua/1"})

    def test_non_success_status_raises(self) -> None:
        fetcher = PageFetcher(session=_session(status_code=503))
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.status_code == 503
        assert exc_info.value.url == URL
        assert "HTTP 503" in str(exc_info.value)

    def test_timeout_raises_fetch_error(self) -> None:
        fetcher = PageFetcher(timeout=1.0, session=_session(side_effect=requests.exceptions.Timeout("slow")))
        with pytest.raises(FetchError, match="Timed out"):
            fetcher.fetch(URL)

    def test_connection_error_raises_fetch_error(self) -> None:
        fetcher = PageFetcher(session=_session(side_effect=requests.exceptions.ConnectionError("refused")))
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(URL)
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_single_request_no_retry(self) -> None:
        session = _session(status_code=500)
        with pytest.raises(FetchError):
            PageFetcher(session=session).fetch(URL)
        assert session.get.call_count == 1


class TestSessions:
    @pytest.fixture
    def created(self):
        sessions = []

        def make() -> Mock:
            sessions.append(_session())
            return sessions[-1]

        with patch("tsa_volumes.fetch.requests.Session", side_effect=make):
            yield sessions

    def test_one_session_per_thread(self, created) -> None:
        fetcher = PageFetcher()
        fetcher.fetch(URL)
        fetcher.fetch(URL)
        assert len(created) == 1

        seen = []

        def worker() -> None:
            fetcher.fetch(URL)
            seen.append(fetcher.session)

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(created) == 3
        assert len({id(s) for s in seen}) == 2
        assert fetcher.session not in seen

    def test_close_closes_every_thread_session(self, created) -> None:
        fetcher = PageFetcher()
        fetcher.fetch(URL)
        worker = threading.Thread(target=fetcher.fetch, args=(URL,))
        worker.start()
        worker.join()

        assert len(created) == 2
        fetcher.close()
        for session in created:
            session.close.assert_called_once()

    def test_injected_session_shared_across_threads(self) -> None:
        session = _session()
        fetcher = PageFetcher(session=session)
        worker = threading.Thread(target=fetcher.fetch, args=(URL,))
        worker.start()
        worker.join()
        fetcher.fetch(URL)

        assert session.get.call_count == 2
        fetcher.close()
        session.close.assert_called_once()
