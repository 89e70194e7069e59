"""Thin helpers over BeautifulSoup selection."""

from __future__ import annotations

from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from newsscraper.infra.logging import get_unified_logger

Node = Union[BeautifulSoup, Tag]

logger = get_unified_logger("scrape", "dom")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def select_all(node: Node, selector: str) -> List[Tag]:
    try:
        return node.select(selector)
    except SelectorSyntaxError as e:
        logger.warning("bad selector %r: %s", selector, e)
        return []


def select_first(node: Node, selector: str) -> Optional[Tag]:
    try:
        return node.select_one(selector)
    except SelectorSyntaxError as e:
        logger.warning("bad selector %r: %s", selector, e)
        return None


def text_of(node: Optional[Tag]) -> str:
    """Concatenated descendant text, trimmed at the ends only."""
    if node is None:
        return ""
    return node.get_text().strip()
