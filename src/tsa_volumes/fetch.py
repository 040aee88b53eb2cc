from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    url: str
    text: str
    status_code: int = 200


class PageFetcher:
    """One GET per call, bounded by ``timeout``. No retries.

    Without an injected ``session`` each calling thread gets its own
    ``requests.Session`` on first use, so one fetcher can serve a thread pool.
    An injected session is used as-is from every thread.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = 'tsa-volumes/0.1',
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._shared = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        if self._shared is not None:
            return self._shared
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def fetch(self, url: str) -> Document:
        try:
            resp = self.session.get(
                url,
                timeout=self.timeout,
                headers={'User-Agent': self.user_agent},
            )
        except requests.exceptions.Timeout as exc:
            raise FetchError(f'Timed out after {self.timeout}s: {exc}', url=url) from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(f'Request failed: {exc}', url=url) from exc

        if not 200 <= resp.status_code < 300:
            raise FetchError(f'HTTP {resp.status_code}', status_code=resp.status_code, url=url)

        logger.debug('Fetched %s (HTTP %s, %d chars)', url, resp.status_code, len(resp.text))
        return Document(url=url, text=resp.text, status_code=resp.status_code)

    def close(self) -> None:
        if self._shared is not None:
            self._shared.close()
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()
