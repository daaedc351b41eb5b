"""Parse Gemini's free-text analysis reply into an ``Analysis``.

The reply is expected to use the section headers requested by
``prompts.ANALYSIS_PROMPT``, but models decorate headers inconsistently:

    **SOURCE SUMMARY:** text on the same line
    ## Key Highlights
    3. **Verified Origin**: ...

Headers are therefore matched case-insensitively with optional markdown
heading, numbering and bold decoration, and an optional colon.
"""

from __future__ import annotations

import logging
import re

from .fallback import summarize
from .models import Analysis
from .prompts import SOCIAL_PLACEHOLDERS

logger = logging.getLogger(__name__)

MAX_HIGHLIGHTS = 10
MIN_HIGHLIGHT_CHARS = 5

# Analysis field -> accepted header labels.
SECTION_LABELS: dict[str, tuple[str, ...]] = {
    "summary": ("SOURCE SUMMARY",),
    "short_summary": ("SHORT SUMMARY",),
    "highlights": ("KEY HIGHLIGHTS",),
    "origin": ("VERIFIED ORIGIN", "HISTORICAL ORIGIN"),
    "forecast": ("FUTURE FORECAST", "CURRENT STATE AND FORECAST"),
    "relevance": ("RELEVANCE SCORE",),
    "linkedin_post": ("LINKEDIN POST", "LINKEDIN"),
    "twitter_post": ("TWITTER POST", "TWITTER"),
    "instagram_caption": ("INSTAGRAM CAPTION", "INSTAGRAM POST", "INSTAGRAM"),
    "facebook_post": ("FACEBOOK POST", "FACEBOOK"),
}

_LABEL_TO_FIELD = {
    label.lower(): name for name, labels in SECTION_LABELS.items() for label in labels
}
# Longest first so "LINKEDIN POST" wins over "LINKEDIN".
_LABEL_ALTERNATION = "|".join(
    re.escape(label) for label in sorted(_LABEL_TO_FIELD, key=len, reverse=True)
)
_HEADER_RE = re.compile(
    r"^[ \t]*(?P<heading>#{1,6}[ \t]*)?(?P<number>\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*"
    rf"(?P<label>{_LABEL_ALTERNATION})(?![A-Za-z])"
    r"[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?",
    re.IGNORECASE | re.MULTILINE,
)

_BARE_PLATFORM_LABELS = frozenset({"LINKEDIN", "TWITTER", "INSTAGRAM", "FACEBOOK"})

_LIST_ITEM_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s+(?P<item>.+?)\s*$")
_SCORE_RE = re.compile(r"score\s*:?\s*\**\s*(\d+(?:\.\d+)?)\s*/\s*10", re.IGNORECASE)
_FRACTION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*/\s*10")


def _is_header(match: re.Match[str], text: str) -> bool:
    """Reject prose lines that merely start with a label word ("Twitter is ...").

    Bare platform names inside a numbered list ("3. **Facebook**: ...") are
    highlight items, not headers.
    """
    if match.group("number") and match.group("label").upper() in _BARE_PLATFORM_LABELS:
        return False
    decoration = match.group(0)
    if match.group("heading") or ":" in decoration or "**" in decoration or "__" in decoration:
        return True
    line_end = text.find("\n", match.end())
    rest = text[match.end() : line_end if line_end != -1 else len(text)]
    return not rest.strip()


def extract_sections(reply: str) -> dict[str, str]:
    """Map analysis field names to the trimmed text under each header.

    A section runs from its header to the next recognised header or the end
    of the reply. The first occurrence of a section wins.
    """
    headers = [m for m in _HEADER_RE.finditer(reply or "") if _is_header(m, reply)]
    sections: dict[str, str] = {}
    for index, match in enumerate(headers):
        name = _LABEL_TO_FIELD[match.group("label").lower()]
        end = headers[index + 1].start() if index + 1 < len(headers) else len(reply)
        if name not in sections:
            sections[name] = reply[match.end() : end].strip()
    return sections


def parse_highlights(section: str) -> list[str]:
    """Return list items from *section* with their markers stripped."""
    highlights: list[str] = []
    for line in section.splitlines():
        match = _LIST_ITEM_RE.match(line)
        if not match:
            continue
        item = match.group("item").strip()
        if len(item) < MIN_HIGHLIGHT_CHARS:
            continue
        highlights.append(item)
        if len(highlights) >= MAX_HIGHLIGHTS:
            break
    return highlights


def parse_relevance_score(reply: str, section: str = "") -> float | None:
    """Extract an ``N/10`` score, clamped to 0-10."""
    match = _SCORE_RE.search(reply or "") or _FRACTION_RE.search(section or "")
    if not match:
        return None
    return min(max(float(match.group(1)), 0.0), 10.0)


def clean_social_post(section: str | None) -> str | None:
    """Remove echoed prompt placeholders; ``None`` if nothing is left."""
    if not section:
        return None
    text = section
    for placeholder in SOCIAL_PLACEHOLDERS:
        text = re.sub(re.escape(placeholder), "", text, flags=re.IGNORECASE)
    text = text.strip()
    return text or None


def parse_analysis(
    reply: str,
    content: str,
    keywords: list[str],
    title: str = "",
    url: str = "",
) -> Analysis:
    """Turn a model reply into an ``Analysis``.

    When the mandatory SOURCE SUMMARY section is missing the deterministic
    fallback is used and every section that did parse is laid over it.
    """
    sections = extract_sections(reply)

    parsed: dict[str, object] = {
        "summary": sections.get("summary", ""),
        "short_summary": sections.get("short_summary") or None,
        "highlights": parse_highlights(sections.get("highlights", "")),
        "origin": sections.get("origin", ""),
        "forecast": sections.get("forecast", ""),
        "relevance_score": (
            parse_relevance_score(reply, sections.get("relevance", "")) if keywords else None
        ),
        "linkedin_post": clean_social_post(sections.get("linkedin_post")),
        "twitter_post": clean_social_post(sections.get("twitter_post")),
        "instagram_caption": clean_social_post(sections.get("instagram_caption")),
        "facebook_post": clean_social_post(sections.get("facebook_post")),
    }

    if not parsed["summary"]:
        logger.warning(
            "source summary missing from model reply, using fallback",
            extra={"url": url, "sections_found": sorted(sections), "reply_length": len(reply or "")},
        )
        return summarize(content, keywords, title=title, url=url).overlay(**parsed)

    logger.debug("model reply parsed", extra={"url": url, "sections_found": sorted(sections)})
    return Analysis(source="model", **parsed)  # type: ignore[arg-type]
