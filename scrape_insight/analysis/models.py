"""Typed result of one content analysis."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Literal

AnalysisSource = Literal["model", "fallback"]


@dataclass(frozen=True)
class Analysis:
    """Summary, narratives and social drafts produced for one page."""

    summary: str
    short_summary: str | None = None
    highlights: list[str] = field(default_factory=list)
    origin: str = ""
    forecast: str = ""
    relevance_score: float | None = None
    linkedin_post: str | None = None
    twitter_post: str | None = None
    instagram_caption: str | None = None
    facebook_post: str | None = None
    source: AnalysisSource = "fallback"

    def overlay(self, **parsed: object) -> Analysis:
        """Return a copy with every non-empty value in *parsed* taking precedence."""
        known = {f.name for f in fields(self)}
        updates = {
            name: value
            for name, value in parsed.items()
            if name in known and value not in (None, "", [])
        }
        return replace(self, **updates)
