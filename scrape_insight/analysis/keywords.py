"""Keyword filtering: narrow cleaned content to keyword-relevant paragraphs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .cleaner import split_paragraphs

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class FilteredContent:
    """Content that survived keyword filtering."""

    content: str
    matched_tokens: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NoMatch:
    """None of the requested keywords occur in the fetched page."""

    url: str
    keywords: list[str]

    @property
    def message(self) -> str:
        phrases = ", ".join(f'"{k}"' for k in self.keywords)
        return f"No relevant content found for {phrases} at {self.url}"


def normalize_keywords(keywords: list[str] | None) -> list[str]:
    """Trim keywords and drop blanks; order and repeats are kept."""
    return [k.strip() for k in keywords or [] if k and k.strip()]


def keyword_tokens(keywords: list[str]) -> list[str]:
    """Expand keywords into the tokens that are searched for.

    A single-word keyword is its own token. Multi-word keywords are split
    into words of at least ``MIN_TOKEN_LENGTH`` characters; if none is long
    enough the whole phrase is kept. Tokens are deduplicated
    case-insensitively, first spelling wins.
    """
    tokens: list[str] = []
    seen: set[str] = set()
    for keyword in normalize_keywords(keywords):
        words = keyword.split()
        if len(words) > 1:
            candidates = [w for w in words if len(w) >= MIN_TOKEN_LENGTH] or [keyword]
        else:
            candidates = [keyword]
        for token in candidates:
            lowered = token.lower()
            if lowered not in seen:
                seen.add(lowered)
                tokens.append(token)
    return tokens


def matched_tokens(tokens: list[str], text: str) -> list[str]:
    """Return the tokens that occur in *text*, case-insensitively."""
    haystack = text.lower()
    return [t for t in tokens if t.lower() in haystack]


def filter_by_keywords(
    content: str,
    keywords: list[str],
    title: str = "",
    url: str = "",
) -> FilteredContent | NoMatch:
    """Keep only the paragraphs that mention a keyword, plus their neighbours.

    Returns ``NoMatch`` when keywords were given but no token occurs in the
    title or body. With no keywords the content is returned unchanged.
    """
    keywords = normalize_keywords(keywords)
    if not keywords:
        return FilteredContent(content=content)

    tokens = keyword_tokens(keywords)
    found = matched_tokens(tokens, f"{title}\n{content}")
    if not found:
        logger.info(
            "no keyword match",
            extra={"url": url, "keywords": keywords, "token_count": len(tokens)},
        )
        return NoMatch(url=url, keywords=keywords)

    paragraphs = split_paragraphs(content)
    hits = [i for i, p in enumerate(paragraphs) if matched_tokens(found, p)]
    if not hits:
        # Only the title matched; the whole body is about the keyword.
        return FilteredContent(content=content, matched_tokens=found)

    keep: set[int] = set()
    for i in hits:
        keep.update(j for j in (i - 1, i, i + 1) if 0 <= j < len(paragraphs))

    selected = [paragraphs[i] for i in sorted(keep)]
    logger.debug(
        "keyword filter applied",
        extra={
            "url": url,
            "matched_tokens": found,
            "paragraphs_in": len(paragraphs),
            "paragraphs_out": len(selected),
        },
    )
    return FilteredContent(content="\n\n".join(selected), matched_tokens=found)
