"""Data models for the scrape submodule."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FetchedPage:
    """A single scraped web page with extracted content and metadata."""

    url: str
    title: str = ""
    markdown: str = ""
    html: str = ""
    description: str = ""
    keywords: str = ""
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    og_url: str = ""
    links: list[dict[str, str]] = field(default_factory=list)
