from __future__ import annotations

import copy
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from newsscraper.core.errors import InvalidUrlError
from newsscraper.core.models import ArticleRecord, ArticleSummary, SelectorProfile
from newsscraper.core.utils import utc_now_iso
from newsscraper.infra.logging import get_unified_logger
from newsscraper.scrape.dates import normalize_date
from newsscraper.scrape.dom import parse_html, select_all, select_first, text_of
from newsscraper.scrape.urls import hostname_of, is_web_url, looks_like_image, resolve

UNKNOWN_AUTHOR = "Unknown"

HEADINGS = "h1, h2, h3, h4, h5, h6"

IMAGE_SOURCE_ATTRS = ("src", "data-src", "data-lazy-src", "data-original", "data-url")

BODY_SELECTORS = (
    "article .content",
    "article .article-content",
    "article .story-content",
    "article .post-content",
    "article .entry-content",
    ".article-body",
    ".story-body",
    ".post-body",
    ".entry-body",
    '[itemprop="articleBody"]',
    ".article__content",
    ".story__content",
    ".post__content",
    ".entry__content",
)

BODY_NOISE = "script, style, iframe, .advertisement, .ad, .social-share, .related-articles"

PARAGRAPH_FALLBACK = "article p, .article p, .story p, .post p, .entry p"

logger = get_unified_logger("scrape", "extract")


def _read(node: Tag, selector: str, meta_aware: bool) -> str:
    if meta_aware and selector.startswith("meta"):
        return str(node.get("content") or "").strip()
    return text_of(node)


def _last_match(soup: BeautifulSoup, selectors: Iterable[str], meta_aware: bool = True) -> str:
    # Every selector is tried; a later non-empty match replaces an earlier one.
    value = ""
    for selector in selectors:
        node = select_first(soup, selector)
        if node is None:
            continue
        found = _read(node, selector, meta_aware)
        if found:
            value = found
    return value


def extract_title(soup: BeautifulSoup, profile: SelectorProfile) -> str:
    title = _last_match(soup, profile.title, meta_aware=False)
    if title:
        return title
    for heading in select_all(soup, HEADINGS):
        text = text_of(heading)
        if text:
            return text
    return ""


def extract_author(soup: BeautifulSoup, profile: SelectorProfile) -> str:
    return _last_match(soup, profile.author) or UNKNOWN_AUTHOR


def extract_raw_date(soup: BeautifulSoup, profile: SelectorProfile) -> str:
    return _last_match(soup, profile.date)


def image_candidates(img: Tag) -> List[str]:
    """Source attributes in priority order, then the first ``data-srcset`` URL."""
    out = [str(img.get(attr) or "").strip() for attr in IMAGE_SOURCE_ATTRS]
    srcset = str(img.get("data-srcset") or "")
    first = srcset.split(",")[0].strip().split(" ")[0] if srcset else ""
    out.append(first)
    return out


def accept_image(src: str, base_url: str) -> Optional[str]:
    if not src or src.startswith("data:") or "svg" in src:
        return None
    try:
        absolute = resolve(src, base_url)
    except InvalidUrlError:
        logger.debug("Invalid image URL: %s", src)
        return None
    if is_web_url(absolute) and looks_like_image(absolute):
        return absolute
    return None


def image_from(img: Tag, base_url: str) -> Optional[str]:
    for src in image_candidates(img):
        absolute = accept_image(src, base_url)
        if absolute:
            return absolute
    return None


def extract_image(soup: BeautifulSoup, base_url: str, profile: SelectorProfile) -> Optional[str]:
    # Unlike the text fields, the first selector yielding a usable image wins.
    for selector in profile.image:
        img = select_first(soup, selector)
        if img is None:
            continue
        absolute = image_from(img, base_url)
        if absolute:
            return absolute

    for img in soup.find_all("img"):
        absolute = image_from(img, base_url)
        if absolute:
            return absolute
    return None


def extract_body(soup: BeautifulSoup) -> Optional[str]:
    for selector in BODY_SELECTORS:
        node = select_first(soup, selector)
        if node is None:
            continue
        # work on a copy so the document stays intact for the image pass
        node = copy.copy(node)
        for junk in select_all(node, BODY_NOISE):
            junk.decompose()
        text = text_of(node)
        if text:
            return text
        break

    paragraphs = [text_of(p) for p in select_all(soup, PARAGRAPH_FALLBACK)]
    body = "\n\n".join(p for p in paragraphs if p)
    return body or None


def extract_article(
    html: str,
    url: str,
    profile: SelectorProfile,
    source: Optional[str] = None,
    now: Optional[str] = None,
) -> Optional[ArticleRecord]:
    """Build an :class:`ArticleRecord` from an article page.

    Returns ``None`` when no title can be found anywhere on the page.
    ``source`` defaults to the article's own hostname and ``now`` is the
    publish-time fallback.
    """
    soup = parse_html(html)
    title = extract_title(soup, profile)
    if not title:
        logger.debug("no title on %s", url)
        return None

    published = normalize_date(extract_raw_date(soup, profile))
    return ArticleRecord(
        title=title,
        author=extract_author(soup, profile),
        published_at=published or now or utc_now_iso(),
        source=source or hostname_of(url),
        url=url,
        image_url=extract_image(soup, url, profile),
        body=extract_body(soup),
    )


def extract_generic(html: str, url: str) -> ArticleSummary:
    """Registry-free best-effort pass used for single-article requests."""
    soup = parse_html(html)
    title = text_of(soup.find("h1")) or text_of(soup.title)
    author = text_of(select_first(soup, '[itemprop="author"]')) or text_of(
        select_first(soup, ".author")
    )
    date = text_of(select_first(soup, '[itemprop="datePublished"]')) or text_of(
        select_first(soup, ".date")
    )

    image_url = ""
    first_img = soup.find("img")
    src = str(first_img.get("src") or "").strip() if first_img is not None else ""
    if src:
        try:
            image_url = resolve(src, url)
        except InvalidUrlError:
            image_url = src

    articles = soup.find_all("article")
    if articles:
        body = "".join(a.get_text() for a in articles).strip()
    else:
        body = "\n\n".join(p.get_text() for p in soup.find_all("p")).strip()

    return ArticleSummary(
        title=title, author=author, date=date, image_url=image_url, body=body, url=url
    )
