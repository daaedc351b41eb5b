"""Deterministic, model-free summarizer.

Produces the same ``Analysis`` shape as the Gemini path using only paragraph
and sentence slicing. It is used when no model is configured, when the
caller asks for deterministic analysis, and whenever the model call or its
reply is unusable.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .cleaner import split_paragraphs
from .keywords import keyword_tokens, matched_tokens
from .models import Analysis

MIN_PARAGRAPH_CHARS = 40
SUMMARY_PARAGRAPHS = 3
SHORT_SUMMARY_CHARS = 200
MAX_HIGHLIGHTS = 8
HIGHLIGHT_CHARS = 200
MIN_HIGHLIGHT_CHARS = 5

# Platform length conventions (characters).
LINKEDIN_LIMIT = 700
TWITTER_LIMIT = 280
INSTAGRAM_LIMIT = 2200
FACEBOOK_LIMIT = 500

_BOILERPLATE_PREFIXES = (
    "skip to",
    "cookie",
    "we use cookies",
    "accept all",
    "sign in",
    "log in",
    "subscribe",
    "newsletter",
    "advertisement",
    "share this",
    "follow us",
    "related articles",
    "read more",
    "copyright",
    "©",
    "all rights reserved",
)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_HEADING_RE = re.compile(r"^\s*#{1,6}\s*")
_HASHTAG_STRIP_RE = re.compile(r"\W+")


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def truncate_text(text: str, limit: int) -> str:
    """Cut *text* to at most *limit* chars; the result is always a prefix.

    Prefers the last sentence end in the second half of the window, then the
    last word boundary.
    """
    if len(text) <= limit:
        return text
    window = text[:limit]
    sentence_end = max(window.rfind(". "), window.rfind("! "), window.rfind("? "))
    if sentence_end >= limit // 2:
        return window[: sentence_end + 1]
    space = window.rfind(" ")
    if space > 0:
        return window[:space].rstrip(" ,;:")
    return window


def _ellipsize(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return truncate_text(text, max(limit - 1, 0)) + "…"


def _is_boilerplate(paragraph: str) -> bool:
    lowered = paragraph.lower()
    return lowered.startswith(_BOILERPLATE_PREFIXES)


def qualifying_paragraphs(content: str) -> list[str]:
    """Paragraphs long enough to summarize, with boilerplate removed."""
    paragraphs = [_HEADING_RE.sub("", p).strip() for p in split_paragraphs(content)]
    return [
        p
        for p in paragraphs
        if len(p) >= MIN_PARAGRAPH_CHARS and not _is_boilerplate(p)
    ]


def _hashtags(keywords: list[str], limit: int) -> str:
    tags: list[str] = []
    for keyword in keywords:
        tag = _HASHTAG_STRIP_RE.sub("", keyword.title())
        if tag and f"#{tag}" not in tags:
            tags.append(f"#{tag}")
    return " ".join(tags[:limit])


def _post(body: str, suffix: str, limit: int) -> str:
    room = max(limit - len(suffix), 0)
    return (_ellipsize(body, room) + suffix).strip()


def _domain(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


def summarize(
    content: str,
    keywords: list[str],
    title: str = "",
    url: str = "",
) -> Analysis:
    """Build a fallback ``Analysis`` from *content* alone.

    Pure and deterministic: identical inputs give identical output.
    """
    domain = _domain(url)
    paragraphs = qualifying_paragraphs(content)
    if not paragraphs:
        paragraphs = split_paragraphs(content)

    if paragraphs:
        summary = "\n\n".join(paragraphs[:SUMMARY_PARAGRAPHS])
        short_summary = truncate_text(paragraphs[0], SHORT_SUMMARY_CHARS)
    else:
        summary = f"No readable content was extracted from {domain or url or 'the page'}."
        short_summary = summary

    highlights: list[str] = []
    for paragraph in paragraphs[:MAX_HIGHLIGHTS]:
        sentences = _sentences(paragraph)
        if sentences:
            highlights.append(truncate_text(sentences[0], HIGHLIGHT_CHARS))
    if len(highlights) < 3:
        # Too few paragraphs; top up from individual sentences.
        for paragraph in paragraphs:
            for sentence in _sentences(paragraph)[1:]:
                if len(highlights) >= MAX_HIGHLIGHTS:
                    break
                highlights.append(truncate_text(sentence, HIGHLIGHT_CHARS))
    deduped: list[str] = []
    for item in highlights:
        if len(item) >= MIN_HIGHLIGHT_CHARS and item not in deduped:
            deduped.append(item)

    subject = title or ", ".join(keywords) or domain or "this page"
    source_name = domain or "the source page"
    focus = f" The requested focus was: {', '.join(keywords)}." if keywords else ""
    origin = (
        f"{subject} is documented on {source_name}. The historical origin of this topic "
        f"has not been independently researched; the page itself is the primary source.{focus}"
    )
    forecast = (
        f"The current state of {subject} is summarized above from {source_name}. "
        "A forward-looking forecast requires model-backed analysis, which was not used "
        "for this result."
    )

    relevance_score = None
    if keywords:
        tokens = keyword_tokens(keywords)
        if tokens:
            found = matched_tokens(tokens, f"{title}\n{content}")
            relevance_score = round(10 * len(found) / len(tokens), 1)

    link = f" {url}" if url else ""
    read_more = f"\n\nRead more:{link}" if url else ""
    linkedin = _post(
        summary.split("\n\n")[0],
        f"{read_more}\n\n{_hashtags(keywords, 3)}".rstrip(),
        LINKEDIN_LIMIT,
    )
    twitter = _post(short_summary, f"{link} {_hashtags(keywords, 2)}".rstrip(), TWITTER_LIMIT)
    instagram = _post(summary, f"\n\n{_hashtags(keywords, 5)}".rstrip(), INSTAGRAM_LIMIT)
    facebook = _post(short_summary, f"\n\nWhat do you think?{link}", FACEBOOK_LIMIT)

    return Analysis(
        summary=summary,
        short_summary=short_summary,
        highlights=deduped,
        origin=origin,
        forecast=forecast,
        relevance_score=relevance_score,
        linkedin_post=linkedin,
        twitter_post=twitter,
        instagram_caption=instagram,
        facebook_post=facebook,
        source="fallback",
    )
