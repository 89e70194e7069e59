# index.py: serverless event function that scrapes one list page per invocation
# -*- coding: utf-8 -*-
import base64
import binascii
import json
import os

from newsscraper.core.config import ScraperSettings
from newsscraper.core.errors import InvalidUrlError, ScrapeError
from newsscraper.infra.logging import get_unified_logger, init_logging
from newsscraper.scrape.runner import NewsScraper

# ========== defaults (environment overrides) ==========
DEFAULT_MAX_ARTICLES = 10
DEFAULT_TIMEOUT = 10

RESPONSE_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": os.getenv("ALLOW_ORIGIN", "*"),
}

logger = get_unified_logger("server", "handler")


def env_int(name, default_int):
    v = os.getenv(name)
    try:
        return int(v) if v is not None else default_int
    except ValueError:
        return default_int


def respond(status, payload):
    return {
        "statusCode": status,
        "headers": dict(RESPONSE_HEADERS),
        "body": json.dumps(payload, ensure_ascii=False),
    }


def parse_url(event):
    raw = event.get("body") or "{}"
    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise InvalidUrlError("Request body is not valid base64 UTF-8") from e
    try:
        body = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as e:
        raise InvalidUrlError("Request body must be JSON") from e
    url = body.get("url") if isinstance(body, dict) else None
    if not url:
        raise InvalidUrlError("URL is required")
    return url


def build_scraper():
    settings = ScraperSettings(
        timeout=env_int("TIMEOUT", DEFAULT_TIMEOUT),
        max_articles=env_int("MAX_ARTICLES", DEFAULT_MAX_ARTICLES),
        concurrency=env_int("CONCURRENCY", DEFAULT_MAX_ARTICLES),
        selectors_file=os.getenv("SELECTORS_FILE") or None,
    )
    return NewsScraper(settings)


# ========== entry point ==========
def handler(event, context, scraper=None):
    """
    Signature: handler(event, context)
    event: {"httpMethod": "POST", "body": "{\"url\": \"https://...\"}"}
    Returns {"statusCode", "headers", "body"}; body is {"articles": [...]} or {"error": "..."}.
    """
    init_logging()
    if (event or {}).get("httpMethod") != "POST":
        return respond(405, {"error": "Method not allowed"})

    owns_scraper = scraper is None
    try:
        url = parse_url(event)
        scraper = scraper or build_scraper()
        result = scraper.scrape(url)
        return respond(200, {"articles": [a.to_dict() for a in result.articles]})
    except ScrapeError as e:
        return respond(e.http_status, e.to_dict())
    except Exception as e:
        logger.exception("unhandled error: %s", e)
        return respond(500, {"error": "Something broke!"})
    finally:
        if owns_scraper and scraper is not None:
            scraper.close()
