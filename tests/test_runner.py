from __future__ import annotations

import threading
import time

import pytest
from conftest import FakeFetcher, article_html

from newsscraper.core.config import ScraperSettings
from newsscraper.core.errors import (
    BlockedError,
    InvalidUrlError,
    NetworkError,
    NoArticlesFoundError,
    UpstreamStatusError,
)
from newsscraper.scrape.runner import NewsScraper

LIST_URL = "https://site.com/"


def _list_page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    return f"<html><body><div class='rail'>{anchors}</div></body></html>"


def _scraper(pages, **settings) -> NewsScraper:
    return NewsScraper(ScraperSettings(**settings), fetcher=FakeFetcher(pages))


def test_end_to_end_general_fallback_and_order():
    pages = {
        LIST_URL: (200, _list_page("/news/123", "/about", "/news/456")),
        "https://site.com/news/123": (200, article_html("First", author="A", date="2024-05-01")),
        "https://site.com/news/456": (200, article_html("Second")),
    }
    result = _scraper(pages).scrape(LIST_URL)
    assert [a.title for a in result.articles] == ["First", "Second"]
    first = result.articles[0]
    assert first.source == "site.com"
    assert first.author == "A"
    assert first.published_at == "2024-05-01T00:00:00.000Z"
    assert (result.total, result.success, result.failed) == (2, 2, 0)


def test_untitled_and_failing_articles_are_skipped():
    pages = {
        LIST_URL: (200, _list_page("/news/ok", "/news/untitled", "/news/gone", "/news/down")),
        "https://site.com/news/ok": (200, article_html("Kept")),
        "https://site.com/news/untitled": (200, "<p class='author'>Someone</p><img src='/a.jpg'>"),
        "https://site.com/news/gone": (404, "missing"),
        "https://site.com/news/down": NetworkError("boom", timeout=True),
    }
    result = _scraper(pages).scrape(LIST_URL)
    assert [a.url for a in result.articles] == ["https://site.com/news/ok"]
    assert result.failed == 3


def test_unexpected_article_error_does_not_abort(monkeypatch):
    import newsscraper.scrape.runner as runner

    real = runner.extract_article

    def flaky(html, url, *a, **k):
        if url.endswith("/bad"):
            raise RuntimeError("parser exploded")
        return real(html, url, *a, **k)

    monkeypatch.setattr(runner, "extract_article", flaky, raising=True)
    pages = {
        LIST_URL: (200, _list_page("/news/bad", "/news/good")),
        "https://site.com/news/bad": (200, article_html("Bad")),
        "https://site.com/news/good": (200, article_html("Good")),
    }
    result = _scraper(pages).scrape(LIST_URL)
    assert [a.title for a in result.articles] == ["Good"]


def test_article_fetches_are_capped():
    hrefs = [f"/news/{i}" for i in range(15)]
    pages = {LIST_URL: (200, _list_page(*hrefs))}
    for h in hrefs:
        pages["https://site.com" + h] = (200, article_html(h))
    scraper = _scraper(pages, max_articles=10)
    result = scraper.scrape(LIST_URL)
    assert len(result.articles) == 10
    assert len(scraper.fetcher.requested) == 11


def test_list_page_status_classification():
    with pytest.raises(BlockedError) as blocked:
        _scraper({LIST_URL: (403, "nope")}).scrape(LIST_URL)
    assert blocked.value.http_status == 403

    with pytest.raises(UpstreamStatusError) as upstream:
        _scraper({LIST_URL: (404, "nope")}).scrape(LIST_URL)
    assert upstream.value.http_status == 404
    assert "Status code: 404" in upstream.value.message

    with pytest.raises(NetworkError) as net:
        _scraper({LIST_URL: NetworkError("Server responded with status 503", status=503)}).scrape(
            LIST_URL
        )
    assert net.value.http_status == 500
    assert not isinstance(net.value, (BlockedError, UpstreamStatusError))


def test_invalid_url_is_rejected_before_fetching():
    scraper = _scraper({})
    with pytest.raises(InvalidUrlError):
        scraper.scrape("not-a-url")
    assert scraper.fetcher.requested == []


def test_no_articles_found_is_a_distinct_signal():
    with pytest.raises(NoArticlesFoundError) as ei:
        _scraper({LIST_URL: (200, _list_page("/about", "/contact"))}).scrape(LIST_URL)
    assert ei.value.http_status == 404

    pages = {
        LIST_URL: (200, _list_page("/news/1")),
        "https://site.com/news/1": (200, "<div>no heading</div>"),
    }
    with pytest.raises(NoArticlesFoundError):
        _scraper(pages).scrape(LIST_URL)


def test_host_profile_is_used():
    abs_url = "https://abs-cbn.com/"
    pages = {
        abs_url: (200, "<div class='news-card'><a href='/news/a'>a</a></div>"),
        "https://abs-cbn.com/news/a": (
            200,
            "<h1>Generic</h1><div class='news-title'>Site Title</div>",
        ),
    }
    result = _scraper(pages).scrape(abs_url)
    # ".news-title" comes before "h1" in that profile, so h1 wins as the later match
    assert result.articles[0].title == "Generic"
    assert result.source == "abs-cbn.com"


class SlowFetcher(FakeFetcher):
    def __init__(self, pages, delay: float) -> None:
        super().__init__(pages)
        self.delay = delay
        self.release = threading.Event()

    def fetch(self, url, timeout=None):
        if url != LIST_URL:
            self.release.wait(self.delay)
        return super().fetch(url, timeout)


def test_request_deadline_abandons_slow_articles():
    pages = {
        LIST_URL: (200, _list_page("/news/slow")),
        "https://site.com/news/slow": (200, article_html("Slow")),
    }
    fetcher = SlowFetcher(pages, delay=5)
    scraper = NewsScraper(ScraperSettings(request_deadline=0.2), fetcher=fetcher)
    started = time.monotonic()
    try:
        with pytest.raises(NoArticlesFoundError):
            scraper.scrape(LIST_URL)
    finally:
        fetcher.release.set()
    assert time.monotonic() - started < 3


def test_extract_single():
    url = "https://site.com/news/9"
    scraper = _scraper({url: (200, "<h1>Single</h1><p>Body</p>")})
    summary = scraper.extract_single(url)
    assert summary.title == "Single"
    assert summary.body == "Body"
    with pytest.raises(UpstreamStatusError):
        _scraper({url: (410, "gone")}).extract_single(url)
