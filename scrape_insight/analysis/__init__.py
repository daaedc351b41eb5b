"""Content analysis: cleaning, keyword filtering, Gemini analysis and fallback."""

from __future__ import annotations

from .cleaner import clean_content
from .engine import ContentAnalyzer
from .fallback import summarize
from .keywords import FilteredContent, NoMatch, filter_by_keywords, normalize_keywords
from .models import Analysis
from .parser import parse_analysis

__all__ = [
    "Analysis",
    "ContentAnalyzer",
    "FilteredContent",
    "NoMatch",
    "clean_content",
    "filter_by_keywords",
    "normalize_keywords",
    "parse_analysis",
    "summarize",
]
