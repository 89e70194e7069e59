"""URL resolution and the article/image URL heuristics."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from newsscraper.core.errors import InvalidUrlError

WEB_SCHEMES = ("http", "https")

_ARTICLE_MARKERS = ("/news/", "/article/", "/story/")
_DATED_PATH = re.compile(r"\d{4}/\d{2}/\d{2}")
_IMAGE_SUFFIX = re.compile(r"\.(jpg|jpeg|png|gif|webp)(\?.*)?$", re.IGNORECASE)


def validate_url(url: Optional[str]) -> str:
    """Return ``url`` stripped if it is a well-formed absolute http(s) URL."""
    if not url or not str(url).strip():
        raise InvalidUrlError("URL is required")
    candidate = str(url).strip()
    try:
        parsed = urlparse(candidate)
        # .port raises on a malformed port
        parsed.port
    except ValueError as e:
        raise InvalidUrlError() from e
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.hostname:
        raise InvalidUrlError()
    return candidate


def hostname_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def resolve(href: str, base: str) -> str:
    """Resolve ``href`` against ``base``; hrefs that carry a scheme are returned as-is."""
    href = (href or "").strip()
    if not href:
        raise InvalidUrlError(f"Empty URL relative to {base}")
    try:
        if urlparse(href).scheme:
            return href
        resolved = urljoin(base, href)
        parsed = urlparse(resolved)
    except ValueError as e:
        raise InvalidUrlError(f"Cannot resolve {href!r} against {base!r}") from e
    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(f"Cannot resolve {href!r} against {base!r}")
    return resolved


def is_web_url(url: str) -> bool:
    try:
        return urlparse(url).scheme.lower() in WEB_SCHEMES
    except ValueError:
        return False


def looks_like_article(url: str) -> bool:
    """Loose recall-first check: news/article/story path segment or a YYYY/MM/DD path."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    if any(marker in path for marker in _ARTICLE_MARKERS):
        return True
    return bool(_DATED_PATH.search(path))


def looks_like_image(url: str) -> bool:
    if not url or url.startswith("data:") or "svg" in url:
        return False
    return bool(_IMAGE_SUFFIX.search(url))
