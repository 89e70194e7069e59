from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from newsscraper.core.errors import InvalidUrlError
from newsscraper.core.models import SelectorProfile
from newsscraper.infra.logging import TRACE, get_unified_logger
from newsscraper.scrape.dom import select_all
from newsscraper.scrape.urls import is_web_url, looks_like_article, resolve

logger = get_unified_logger("scrape", "links")


def _collect(anchors: Iterable[Tag], base_url: str, found: Dict[str, None]) -> None:
    for a in anchors:
        href = a.get("href")
        if not href or not str(href).strip():
            continue
        try:
            absolute = resolve(str(href), base_url)
        except InvalidUrlError:
            logger.debug("Invalid article URL: %s", href)
            continue
        if is_web_url(absolute) and looks_like_article(absolute):
            found.setdefault(absolute, None)
        else:
            logger.log(TRACE, "not an article link: %s", absolute)


def discover_links(
    soup: BeautifulSoup, base_url: str, profile: SelectorProfile, limit: Optional[int] = None
) -> List[str]:
    """Candidate article URLs from a list page, deduplicated, in first-seen order.

    Anchors inside the profile's article containers are scanned first; when that
    finds nothing every anchor in the document is scanned instead.
    """
    found: Dict[str, None] = {}
    for selector in profile.article:
        for container in select_all(soup, selector):
            _collect(container.find_all("a"), base_url, found)

    if not found:
        logger.info("No articles found with selectors, trying general approach...")
        _collect(soup.find_all("a"), base_url, found)

    links = list(found)
    logger.info("Found %d article links", len(links))
    if limit is not None:
        links = links[: max(0, limit)]
    return links
