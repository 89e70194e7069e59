"""Lightweight smoke checks that don't hit network.

Run: python scripts/smoke.py
"""

from __future__ import annotations

LIST_PAGE = """
<html><body>
  <div class="sidebar"><a href="/news/2024/first-story">First</a></div>
  <article><a href="/about">About</a></article>
</body></html>
"""

ARTICLE_PAGE = """
<html><head><meta name="author" content="Jane Roe"></head><body>
  <article>
    <h1>Smoke Headline</h1>
    <time>2024-05-01</time>
    <img data-src="/media/lead.jpg">
    <div class="article-body"><p>Body text.</p><script>x()</script></div>
  </article>
</body></html>
"""


def check_extraction() -> None:
    from newsscraper.scrape.dom import parse_html
    from newsscraper.scrape.extractor import extract_article
    from newsscraper.scrape.links import discover_links
    from newsscraper.scrape.selectors import build_registry

    profile = build_registry().default
    links = discover_links(parse_html(LIST_PAGE), "https://example.com/", profile)
    assert links == ["https://example.com/news/2024/first-story"], links

    rec = extract_article(ARTICLE_PAGE, links[0], profile)
    assert rec is not None
    assert rec.title == "Smoke Headline"
    assert rec.author == "Jane Roe"
    assert rec.published_at == "2024-05-01T00:00:00.000Z"
    assert rec.image_url == "https://example.com/media/lead.jpg"
    assert rec.body == "Body text."


def main() -> None:
    check_extraction()
    print("smoke ok")


if __name__ == "__main__":
    main()
