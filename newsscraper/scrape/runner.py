from __future__ import annotations

import contextvars
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Dict, List, Optional

from newsscraper.core.config import ScraperSettings
from newsscraper.core.errors import ArticleParseError, NoArticlesFoundError, ScrapeError
from newsscraper.core.models import ArticleRecord, ArticleSummary, ScrapeResult, SelectorProfile
from newsscraper.core.utils import utc_now_iso
from newsscraper.infra.logging import (
    get_unified_logger,
    log_batch_processing,
    log_processing_step,
    log_task_end,
    log_task_start,
    mdc_scope,
)
from newsscraper.scrape.dom import parse_html
from newsscraper.scrape.extractor import extract_article, extract_generic
from newsscraper.scrape.fetcher import DocumentFetcher
from newsscraper.scrape.links import discover_links
from newsscraper.scrape.selectors import SelectorRegistry, build_registry
from newsscraper.scrape.urls import hostname_of, validate_url

logger = get_unified_logger("scrape", "run")


class NewsScraper:
    """List page -> candidate links -> article records.

    List-page failures raise a :class:`ScrapeError` subclass; per-article
    failures are logged and counted as ``failed`` in the result.
    """

    def __init__(
        self,
        settings: Optional[ScraperSettings] = None,
        fetcher: Optional[DocumentFetcher] = None,
        registry: Optional[SelectorRegistry] = None,
    ) -> None:
        self.settings = settings or ScraperSettings()
        self.fetcher = fetcher or DocumentFetcher(
            timeout=self.settings.timeout, pool_size=self.settings.concurrency
        )
        self.registry = registry or build_registry(self.settings.selectors_file)

    def _scrape_one(
        self, url: str, profile: SelectorProfile, source: str
    ) -> Optional[ArticleRecord]:
        html = self.fetcher.fetch_html(url)
        try:
            return extract_article(html, url, profile, source=source, now=utc_now_iso())
        except (ValueError, TypeError, AttributeError) as e:
            raise ArticleParseError(f"Failed to parse {url}: {e}") from e

    def _scrape_articles(
        self,
        links: List[str],
        profile: SelectorProfile,
        source: str,
        result: ScrapeResult,
        budget: float,
    ) -> None:
        by_url: Dict[str, ArticleRecord] = {}
        ex = ThreadPoolExecutor(
            max_workers=max(1, min(self.settings.concurrency, len(links))),
            thread_name_prefix="article",
        )
        futs: Dict[Future, str] = {}
        try:
            for u in links:
                # each task gets its own context copy so worker logs carry the MDC
                ctx = contextvars.copy_context()
                futs[ex.submit(ctx.run, self._scrape_one, u, profile, source)] = u
            for fut in as_completed(futs, timeout=max(0.0, budget)):
                u = futs[fut]
                try:
                    record = fut.result()
                except ScrapeError as e:
                    logger.warning("skipping article %s: %s", u, e.message)
                    continue
                except Exception as e:
                    logger.warning("skipping article %s: %s", u, e, exc_info=True)
                    continue
                if record is None:
                    logger.info("no title, dropping %s", u)
                    continue
                by_url[u] = record
        except FuturesTimeout:
            pending = sum(1 for f in futs if not f.done())
            logger.warning(
                "request deadline of %.1fs reached, abandoning %d article(s)",
                self.settings.request_deadline,
                pending,
            )
        finally:
            ex.shutdown(wait=False, cancel_futures=True)

        # keep candidate-link order, not completion order
        result.articles = [by_url[u] for u in links if u in by_url]
        result.success = len(result.articles)
        result.failed = result.total - result.success

    def scrape(self, url: Optional[str]) -> ScrapeResult:
        """Scrape a list page.

        Raises InvalidUrlError, BlockedError, UpstreamStatusError or NetworkError
        for list-page problems, and NoArticlesFoundError when nothing titled
        came back.
        """
        list_url = validate_url(url)
        started = time.monotonic()
        source = hostname_of(list_url)
        with mdc_scope(list_url=list_url):
            log_task_start(
                "scrape", "run", {"url": list_url, "max_articles": self.settings.max_articles}
            )
            try:
                result = self._run(list_url, source, started)
            except ScrapeError as e:
                log_task_end("scrape", "run", False, {"error": e.message})
                raise
            log_task_end("scrape", "run", True, result.stats())
            return result

    def _run(self, list_url: str, source: str, started: float) -> ScrapeResult:
        html = self.fetcher.fetch_html(list_url)
        profile = self.registry.profile_for(source)
        links = discover_links(parse_html(html), list_url, profile, limit=self.settings.max_articles)
        log_processing_step(
            "scrape", "run", "candidate links", {"profile_host": source, "count": len(links)}
        )
        result = ScrapeResult(source=source, total=len(links))
        if links:
            budget = self.settings.request_deadline - (time.monotonic() - started)
            self._scrape_articles(links, profile, source, result, budget)
        log_batch_processing(
            "scrape",
            "run",
            result.total,
            result.success,
            result.failed,
            round(time.monotonic() - started, 3),
        )
        if not result.articles:
            raise NoArticlesFoundError()
        return result

    def extract_single(self, url: Optional[str]) -> ArticleSummary:
        """Generic extraction of one article page, without host selectors."""
        article_url = validate_url(url)
        html = self.fetcher.fetch_html(article_url)
        return extract_generic(html, article_url)

    def close(self) -> None:
        self.fetcher.close()
