from __future__ import annotations

from typing import Optional


class ScrapeError(Exception):
    """Base class for failures surfaced to callers.

    ``http_status`` is the status an HTTP surface should answer with and
    ``message`` is the user-facing text.
    """

    http_status: int = 500
    default_message: str = "Error setting up the request. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class InvalidUrlError(ScrapeError):
    """Missing or malformed URL."""

    http_status = 400
    default_message = "Invalid URL format"


class BlockedError(ScrapeError):
    """Upstream answered 403."""

    http_status = 403
    default_message = (
        "Access to this website is forbidden. The website might be blocking scraping attempts."
    )


class UpstreamStatusError(ScrapeError):
    """Upstream answered with a non-200 status below 500."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = int(status)
        self.http_status = self.status
        super().__init__(message or f"Failed to fetch the website. Status code: {self.status}")


class NetworkError(ScrapeError):
    """Timeout, DNS failure, refused connection or a 5xx answer."""

    default_message = "No response received from the website. Please check the URL and try again."

    def __init__(
        self, message: Optional[str] = None, *, timeout: bool = False, status: Optional[int] = None
    ) -> None:
        self.timeout = timeout
        self.status = status
        super().__init__(message)


class NoArticlesFoundError(ScrapeError):
    """The list page was fetched but no titled article could be extracted."""

    http_status = 404
    default_message = (
        "No news articles found. The website might use a different structure or dynamic loading."
    )


class ArticleParseError(ScrapeError):
    """A single article could not be parsed; never reaches the caller."""

    default_message = "Failed to parse article"
