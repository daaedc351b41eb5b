"""Analysis engine: one Gemini call per page, deterministic fallback otherwise."""

from __future__ import annotations

import logging

from pydantic_ai import Agent
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.settings import ModelSettings

from scrape_insight.config import Settings

from .fallback import summarize
from .models import Analysis
from .parser import parse_analysis
from .prompts import NO_MATCH_SENTINEL, format_analysis_prompt

logger = logging.getLogger(__name__)


class ContentAnalyzer:
    """Builds the analysis prompt, calls Gemini and parses the reply.

    Whether a model is available is decided once, at construction: without
    ``GEMINI_API_KEY`` every call goes straight to the fallback summarizer.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._model = settings.gemini_model
        self._agent: Agent | None = None
        if settings.gemini_api_key:
            model = GoogleModel(
                settings.gemini_model,
                provider=GoogleProvider(api_key=settings.gemini_api_key),
            )
            self._agent = Agent(model)
        else:
            logger.warning("GEMINI_API_KEY not set, analysis will use the fallback summarizer")

    @property
    def model_available(self) -> bool:
        return self._agent is not None

    async def analyze(
        self,
        content: str,
        keywords: list[str],
        url: str,
        title: str = "",
        use_model: bool = True,
    ) -> Analysis:
        """Analyse *content*; never raises for upstream or parsing problems."""
        if not use_model or self._agent is None:
            logger.info(
                "deterministic analysis",
                extra={"url": url, "requested_model": use_model, "model_available": self.model_available},
            )
            return summarize(content, keywords, title=title, url=url)

        prompt = format_analysis_prompt(
            content,
            keywords,
            url,
            title=title,
            max_chars=self._settings.analysis_max_chars,
        )
        logger.info(
            "model analysis started",
            extra={
                "url": url,
                "model": self._model,
                "prompt_chars": len(prompt),
                "keyword_count": len(keywords),
            },
        )

        reply = await self._generate(prompt, url)
        if not reply:
            return summarize(content, keywords, title=title, url=url)

        if reply.lstrip().upper().startswith(NO_MATCH_SENTINEL):
            logger.info("model reported no relevant content, using fallback", extra={"url": url})
            return summarize(content, keywords, title=title, url=url)

        analysis = parse_analysis(reply, content, keywords, title=title, url=url)
        logger.info(
            "model analysis completed",
            extra={
                "url": url,
                "source": analysis.source,
                "reply_chars": len(reply),
                "highlights": len(analysis.highlights),
            },
        )
        return analysis

    async def _generate(self, prompt: str, url: str) -> str:
        """Return the reply text, or ``""`` when the call fails or is empty."""
        if self._agent is None:
            return ""
        try:
            result = await self._agent.run(
                prompt,
                model_settings=ModelSettings(
                    temperature=self._settings.gemini_temperature,
                    max_tokens=self._settings.gemini_max_output_tokens,
                ),
            )
            text = (result.output or "").strip()
            usage = result.usage()
        except Exception:
            logger.warning("gemini request failed, using fallback", extra={"url": url}, exc_info=True)
            return ""

        logger.debug(
            "gemini usage",
            extra={
                "url": url,
                "input_tokens": usage.input_tokens or 0,
                "output_tokens": usage.output_tokens or 0,
            },
        )
        if not text:
            logger.warning("gemini returned an empty reply, using fallback", extra={"url": url})
        return text
