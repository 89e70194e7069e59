from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from newsscraper.core.config import DEFAULT_TIMEOUT
from newsscraper.core.errors import BlockedError, NetworkError, UpstreamStatusError
from newsscraper.infra.logging import get_unified_logger

BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

logger = get_unified_logger("scrape", "fetch")


@dataclass(frozen=True)
class FetchResponse:
    url: str
    status_code: int
    text: str


class DocumentFetcher:
    """GET pages with browser-like headers.

    Statuses in [200, 500) come back to the caller; 5xx answers and transport
    failures raise :class:`NetworkError`. No retries.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, pool_size: int = 10) -> None:
        self.timeout = timeout
        self.session = self._build_session(pool_size)

    def _build_session(self, pool_size: int) -> requests.Session:
        s = requests.Session()
        adapter = HTTPAdapter(max_retries=0, pool_connections=pool_size, pool_maxsize=pool_size)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        s.headers.update(BROWSER_HEADERS)
        return s

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        try:
            resp = self.session.get(url, timeout=timeout or self.timeout)
        except requests.Timeout as e:
            logger.warning("timed out fetching %s", url)
            raise NetworkError(timeout=True) from e
        except requests.RequestException as e:
            logger.warning("request to %s failed: %s", url, e)
            raise NetworkError() from e

        logger.debug("GET %s -> %s", url, resp.status_code)
        if resp.status_code >= 500 or resp.status_code < 200:
            logger.warning("GET %s answered %s", url, resp.status_code)
            raise NetworkError(status=resp.status_code)
        resp.encoding = resp.apparent_encoding or resp.encoding or "utf-8"
        return FetchResponse(url=url, status_code=resp.status_code, text=resp.text)

    def fetch_html(self, url: str, timeout: Optional[float] = None) -> str:
        """Fetch and insist on a 200: 403 is :class:`BlockedError`, other codes are
        :class:`UpstreamStatusError`."""
        resp = self.fetch(url, timeout=timeout)
        if resp.status_code == 403:
            raise BlockedError()
        if resp.status_code != 200:
            raise UpstreamStatusError(resp.status_code)
        return resp.text

    def close(self) -> None:
        self.session.close()
