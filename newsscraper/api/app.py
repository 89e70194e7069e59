"""HTTP surface: list-page scrape, single-article extraction and a liveness probe."""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from newsscraper.core.config import ScraperSettings
from newsscraper.core.errors import InvalidUrlError, ScrapeError
from newsscraper.infra.logging import get_unified_logger, log_error
from newsscraper.scrape.runner import NewsScraper

logger = get_unified_logger("api", "http")


def _requested_url() -> str:
    data: Any = request.get_json(silent=True) or {}
    url = data.get("url") if isinstance(data, dict) else None
    if not url:
        raise InvalidUrlError("URL is required")
    return str(url)


def create_app(
    settings: Optional[ScraperSettings] = None, scraper: Optional[NewsScraper] = None
) -> Flask:
    settings = settings or ScraperSettings()
    scraper = scraper or NewsScraper(settings)

    app = Flask(__name__)
    app.config["SCRAPER"] = scraper
    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        methods=["GET", "POST"],
        supports_credentials=True,
    )

    @app.route("/api/test", methods=["GET"])
    def liveness():
        logger.debug("Test endpoint hit")
        return jsonify({"message": "Server is running"})

    @app.route("/api/scrape", methods=["POST"])
    def scrape_list_page():
        url = _requested_url()
        logger.info("Scraping URL: %s", url)
        result = scraper.scrape(url)
        return jsonify({"news": [a.to_dict() for a in result.articles]})

    @app.route("/api/article", methods=["POST"])
    def scrape_single_article():
        url = _requested_url()
        logger.info("Extracting article: %s", url)
        return jsonify(scraper.extract_single(url).to_dict())

    @app.errorhandler(ScrapeError)
    def handle_scrape_error(e: ScrapeError):
        logger.warning("%s %s -> %s %s", request.method, request.path, e.http_status, e.message)
        return jsonify(e.to_dict()), e.http_status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        log_error("api", "http", e, f"{request.method} {request.path}")
        return jsonify({"error": "Something broke!"}), 500

    return app
