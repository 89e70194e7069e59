# -*- coding: utf-8 -*-
from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pytest

# Ensure project root is importable for tests
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from newsscraper.scrape.fetcher import DocumentFetcher, FetchResponse  # noqa: E402

Page = Union[Tuple[int, str], Exception]


class FakeFetcher(DocumentFetcher):
    """Serves canned pages; an Exception value is raised instead of answered."""

    def __init__(self, pages: Optional[Dict[str, Page]] = None) -> None:
        super().__init__(timeout=1)
        self.pages: Dict[str, Page] = dict(pages or {})
        self.requested: List[str] = []

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        self.requested.append(url)
        page = self.pages.get(url, (404, "not found"))
        if isinstance(page, Exception):
            raise page
        status, text = page
        return FetchResponse(url=url, status_code=status, text=text)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


def article_html(
    title: str = "Headline",
    author: str = "",
    date: str = "",
    img: str = "",
    body: str = "",
) -> str:
    parts = ["<html><body><article>"]
    if title:
        parts.append(f"<h1>{title}</h1>")
    if author:
        parts.append(f'<span class="author">{author}</span>')
    if date:
        parts.append(f"<time>{date}</time>")
    if img:
        parts.append(f'<img src="{img}">')
    if body:
        parts.append(f'<div class="article-body"><p>{body}</p></div>')
    parts.append("</article></body></html>")
    return "".join(parts)
