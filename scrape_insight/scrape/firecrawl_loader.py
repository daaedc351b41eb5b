"""Firecrawl page loader implementation."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import urljoin, urlparse

from firecrawl import AsyncFirecrawl

from scrape_insight.errors import ConfigurationError, FetchError

from .models import FetchedPage

logger = logging.getLogger(__name__)


class PageLoader(Protocol):
    """Protocol for page loaders."""

    async def load(self, url: str, keywords: list[str] | None = None) -> FetchedPage: ...


def _field(obj: Any, *names: str) -> Any:
    """Read the first present attribute/key among *names* from a dict or object.

    Firecrawl returns camelCase dicts from the raw API and snake_case
    objects from the SDK, so callers pass both spellings.
    """
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value if v)
    return str(value)


def _normalize_links(raw_links: Any, page_url: str) -> list[dict[str, str]]:
    """Turn Firecrawl's link list into ``{url, text, type}`` dicts.

    Entries may be bare URL strings or dicts with ``url``/``href`` and
    ``text``. Relative URLs are resolved against *page_url*, duplicates are
    dropped (first occurrence wins) and each link is tagged ``internal`` or
    ``external`` by host.
    """
    if not raw_links:
        return []

    page_host = (urlparse(page_url).hostname or "").lower()
    seen: set[str] = set()
    links: list[dict[str, str]] = []
    for entry in raw_links:
        if isinstance(entry, str):
            href, text = entry, ""
        else:
            href = _as_text(_field(entry, "url", "href"))
            text = _as_text(_field(entry, "text", "title"))
        href = href.strip()
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            continue
        absolute = urljoin(page_url, href)
        if absolute in seen:
            continue
        seen.add(absolute)
        host = (urlparse(absolute).hostname or "").lower()
        links.append(
            {
                "url": absolute,
                "text": text.strip() or absolute,
                "type": "internal" if host == page_host else "external",
            }
        )
    return links


class FirecrawlLoader:
    """Loads pages using the Firecrawl API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "",
        exclude_tags: list[str] | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("FIRECRAWL_API_KEY is not configured")
        kwargs: dict = {"api_key": api_key}
        if api_url:
            kwargs["api_url"] = api_url
        self._client = AsyncFirecrawl(**kwargs)
        self._exclude_tags = list(exclude_tags or [])

    async def load(self, url: str, keywords: list[str] | None = None) -> FetchedPage:
        """Scrape a single URL via Firecrawl and return a FetchedPage.

        *keywords* are only recorded in the log as a hint; they never change
        what is fetched. Raises ``FetchError`` when the upstream reports a
        failure; transport errors propagate unchanged.
        """
        logger.debug(
            "firecrawl scrape requested",
            extra={"url": url, "keyword_hint": (keywords or [])[:5]},
        )
        try:
            response = await self._client.scrape(
                url,
                formats=["markdown", "html", "links"],
                only_main_content=True,
                exclude_tags=self._exclude_tags,
            )
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            if status_code is None:
                raise
            logger.warning(
                "firecrawl scrape failed",
                extra={"url": url, "status_code": status_code},
            )
            raise FetchError(
                f"Content extraction failed with status {status_code}",
                status_code=status_code,
            ) from exc

        # Raw API payloads wrap the document as {"success": ..., "data": {...}}
        if isinstance(response, dict) and "data" in response:
            if response.get("success") is False:
                raise FetchError(_as_text(response.get("error")) or "Content extraction failed")
            response = response["data"]

        if not response:
            raise FetchError("Content extraction returned no data")

        markdown = _as_text(_field(response, "markdown"))
        html = _as_text(_field(response, "html"))
        if not markdown and not html:
            raise FetchError("Content extraction returned an empty page")

        metadata = _field(response, "metadata") or {}
        page = FetchedPage(
            url=url,
            title=_as_text(_field(metadata, "title", "og_title", "ogTitle")),
            markdown=markdown,
            html=html,
            description=_as_text(_field(metadata, "description", "og_description", "ogDescription")),
            keywords=_as_text(_field(metadata, "keywords")),
            og_title=_as_text(_field(metadata, "og_title", "ogTitle")),
            og_description=_as_text(_field(metadata, "og_description", "ogDescription")),
            og_image=_as_text(_field(metadata, "og_image", "ogImage")),
            og_url=_as_text(_field(metadata, "og_url", "ogUrl", "source_url", "sourceURL")),
            links=_normalize_links(_field(response, "links"), url),
        )
        logger.debug(
            "firecrawl scrape complete",
            extra={
                "url": url,
                "markdown_length": len(markdown),
                "html_length": len(html),
                "link_count": len(page.links),
            },
        )
        return page
