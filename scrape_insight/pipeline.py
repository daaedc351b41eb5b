"""Scrape pipeline: fetch -> clean -> keyword filter -> analyze -> ScrapeResult."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from scrape_insight.analysis import (
    Analysis,
    ContentAnalyzer,
    NoMatch,
    clean_content,
    filter_by_keywords,
    normalize_keywords,
    summarize,
)
from scrape_insight.analysis.cleaner import html_to_markdown
from scrape_insight.analysis.fallback import qualifying_paragraphs, truncate_text
from scrape_insight.analysis.keywords import keyword_tokens, matched_tokens
from scrape_insight.api.schemas import (
    HighlightItem,
    LinkItem,
    NoMatchDetail,
    OgData,
    ScrapeResponse,
    ScrapeResult,
    SocialPosts,
)
from scrape_insight.config import Settings
from scrape_insight.errors import FetchError, InvalidURLError
from scrape_insight.scrape import FetchedPage, PageLoader

logger = logging.getLogger(__name__)

_VALID_SCHEMES = {"http", "https"}

MAX_EXCERPTS = 5
EXCERPT_CHARS = 300


@dataclass(frozen=True)
class ScrapeOutcome:
    """Response envelope plus the HTTP status it should be sent with."""

    response: ScrapeResponse
    status_code: int = 200


def validate_url(url: str | None) -> str:
    """Return the stripped URL or raise ``InvalidURLError``.

    Requires an absolute http(s) URL with a host.
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidURLError("URL is required")
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _VALID_SCHEMES or not parsed.hostname:
        raise InvalidURLError("Please enter a valid URL (include http:// or https://)")
    return candidate


def _excerpts(content: str, keywords: list[str]) -> list[HighlightItem]:
    """Pick leading paragraphs of *content* as highlighted excerpts.

    Excerpts mentioning a keyword token are ``high`` importance; otherwise
    the first is ``high``, the next two ``medium`` and the rest ``low``.
    """
    tokens = keyword_tokens(keywords)
    items: list[HighlightItem] = []
    for index, paragraph in enumerate(qualifying_paragraphs(content)[:MAX_EXCERPTS]):
        text = truncate_text(paragraph, EXCERPT_CHARS)
        if index == 0 or (tokens and matched_tokens(tokens, text)):
            importance = "high"
        else:
            importance = "medium" if index < 3 else "low"
        items.append(HighlightItem(text=text, importance=importance))
    return items


def build_result(
    page: FetchedPage,
    cleaned: str,
    analyzed_content: str,
    keywords: list[str],
    analysis: Analysis,
    raw_content_max_chars: int,
) -> ScrapeResult:
    """Assemble the transient (unsaved) ``ScrapeResult`` for one page."""
    title = page.title or page.og_title
    return ScrapeResult(
        url=page.url,
        title=title,
        meta_description=page.description or page.og_description,
        keywords=keywords,
        links=[LinkItem(**link) for link in page.links],
        highlighted_content=_excerpts(analyzed_content, keywords),
        og_data=OgData(
            title=page.og_title or title,
            description=page.og_description or page.description,
            image=page.og_image,
            url=page.og_url or page.url,
        ),
        raw_content=cleaned[:raw_content_max_chars],
        ai_summary=analysis.summary,
        short_summary=analysis.short_summary,
        verified_origin=analysis.origin,
        future_forecast=analysis.forecast,
        relevance_score=analysis.relevance_score,
        social_posts=SocialPosts(
            linkedin=analysis.linkedin_post,
            twitter=analysis.twitter_post,
            instagram=analysis.instagram_caption,
            facebook=analysis.facebook_post,
        ),
        key_highlights=analysis.highlights or None,
        analysis_source=analysis.source,
    )


class ScrapePipeline:
    """Runs one scrape request end to end.

    Every stage failure is turned into a ``{success: false, error}``
    envelope; nothing propagates to the caller.
    """

    def __init__(
        self,
        loader: PageLoader | None,
        analyzer: ContentAnalyzer,
        settings: Settings,
    ) -> None:
        self._loader = loader
        self._analyzer = analyzer
        self._settings = settings

    async def run(
        self,
        url: str | None,
        keywords: list[str] | None = None,
        use_model_analysis: bool = True,
    ) -> ScrapeOutcome:
        try:
            url = validate_url(url)
        except InvalidURLError as exc:
            logger.info("scrape rejected", extra={"url": (url or "")[:200], "reason": str(exc)})
            return ScrapeOutcome(ScrapeResponse(success=False, error=str(exc)), status_code=400)

        keywords = normalize_keywords(keywords)
        logger.info(
            "scrape started",
            extra={"url": url, "keywords": keywords[:10], "use_model_analysis": use_model_analysis},
        )

        if self._loader is None:
            logger.error("scrape requested but FIRECRAWL_API_KEY is not configured")
            return ScrapeOutcome(
                ScrapeResponse(success=False, error="Content extraction service is not configured"),
                status_code=503,
            )

        # --- Stage 1: Fetch ---
        try:
            page = await self._loader.load(url, keywords)
        except FetchError as exc:
            logger.warning(
                "scrape fetch failed",
                extra={"url": url, "status_code": exc.status_code, "error": str(exc)},
            )
            return ScrapeOutcome(ScrapeResponse(success=False, error=str(exc)), status_code=502)
        except Exception:
            logger.exception("scrape fetch raised", extra={"url": url})
            return ScrapeOutcome(
                ScrapeResponse(success=False, error="Failed to scrape website"),
                status_code=502,
            )

        # --- Stage 2: Clean and filter ---
        body = page.markdown or html_to_markdown(page.html)
        cleaned = clean_content(body)
        filtered = filter_by_keywords(cleaned, keywords, title=page.title, url=url)
        if isinstance(filtered, NoMatch):
            return ScrapeOutcome(
                ScrapeResponse(
                    success=True,
                    outcome="no_match",
                    no_match=NoMatchDetail(
                        url=filtered.url,
                        keywords=filtered.keywords,
                        message=filtered.message,
                    ),
                )
            )

        # --- Stage 3: Analyze ---
        try:
            analysis = await self._analyzer.analyze(
                filtered.content,
                keywords,
                url,
                title=page.title,
                use_model=use_model_analysis,
            )
        except Exception:
            logger.exception("analysis raised, using fallback", extra={"url": url})
            analysis = summarize(filtered.content, keywords, title=page.title, url=url)

        result = build_result(
            page,
            cleaned,
            filtered.content,
            keywords,
            analysis,
            self._settings.raw_content_max_chars,
        )
        logger.info(
            "scrape completed",
            extra={
                "url": url,
                "analysis_source": result.analysis_source,
                "content_chars": len(cleaned),
                "analyzed_chars": len(filtered.content),
                "links": len(result.links),
            },
        )
        return ScrapeOutcome(ScrapeResponse(success=True, outcome="analyzed", data=result))
