"""Web scraping submodule."""

from __future__ import annotations

from .firecrawl_loader import FirecrawlLoader, PageLoader
from .models import FetchedPage

__all__ = [
    "FetchedPage",
    "FirecrawlLoader",
    "PageLoader",
]
