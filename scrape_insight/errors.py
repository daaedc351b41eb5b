"""Exception types shared across the scrape pipeline."""

from __future__ import annotations


class ScrapeInsightError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(ScrapeInsightError):
    """A required upstream credential or setting is missing."""


class InvalidURLError(ScrapeInsightError):
    """The requested URL is empty or not an absolute http(s) URL."""


class FetchError(ScrapeInsightError):
    """The content-extraction upstream failed or returned nothing usable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StoreError(ScrapeInsightError):
    """A Supabase read/write failed."""
