"""Boilerplate removal for scraped markdown/HTML."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter

_JUNK_TAGS = ("script", "style", "noscript", "iframe", "svg", "template")

_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
# Innermost first so [![img](a)](b) style nesting collapses cleanly.
_MD_LINK_RE = re.compile(r"\[([^\[\]]*)\]\([^)]*\)")
_MARKUP_HINT_RE = re.compile(r"<[a-zA-Z/!]|&(?:[a-zA-Z]{2,8}|#\d{1,6}|#x[0-9a-fA-F]{1,6});")
_BARE_URL_LINE_RE = re.compile(r"^[ \t]*<?https?://\S+>?[ \t]*$", re.MULTILINE)

_SKIP_LINK_RE = re.compile(
    r"^[ \t]*(?:[\[(][ \t]*)?(?:skip|jump) to (?:main )?(?:content|navigation|search|footer)\b.*$",
    re.IGNORECASE | re.MULTILINE,
)

# Banner and marker patterns are matched against a line with its
# whitespace and emphasis/heading/quote decoration already stripped.
_LINE_DECORATION = " \t*_#>"

_DATE = (
    r"(?:(?:mon|tues|wednes|thurs|fri|satur|sun)day,?[ \t]+)?"
    r"(?:\d{1,2}(?:st|nd|rd|th)?[ \t]+[a-z]{3,9}\.?,?[ \t]+\d{4}"
    r"|[a-z]{3,9}\.?[ \t]+\d{1,2}(?:st|nd|rd|th)?,?[ \t]+\d{4}"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4})"
    r"(?:[, \t]+(?:at[ \t]+)?\d{1,2}[:.]\d{2}(?:[ \t]*[ap]\.?m\.?)?(?:[ \t]*[a-z]{2,5})?)?"
)
_DATE_BANNER_RE = re.compile(
    r"(?:(?:(?:last[ \t]+)?updated|published|posted|modified)(?:[ \t]+on)?[ \t]*(?::[ \t]*)?)?"
    + _DATE,
    re.IGNORECASE,
)

_LIVE_MARKER_RE = re.compile(
    r"(?:[•●🔴][ \t]*)?"
    r"(?:live|live now|live updates|live coverage|breaking|breaking news|developing story|updated)",
    re.IGNORECASE,
)

_FUNDRAISING_RE = re.compile(
    r"support (?:our|independent|quality) journalism"
    r"|make a (?:one-off |one-time |monthly |recurring )?(?:donation|contribution)"
    r"|donate (?:now|today)"
    r"|become a (?:member|supporter|subscriber) today"
    r"|(?:readers like you|your support) (?:keeps|helps|makes)",
    re.IGNORECASE,
)

_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _soup(markup: str) -> BeautifulSoup:
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup.find_all(list(_JUNK_TAGS)):
        tag.decompose()
    return soup


def html_to_markdown(markup: str) -> str:
    """Convert an HTML page body to markdown with script/style blocks removed."""
    if not markup:
        return ""
    return MarkdownConverter(heading_style="ATX").convert_soup(_soup(markup))


def _is_banner_line(line: str) -> bool:
    core = line.strip(_LINE_DECORATION)
    if not core:
        return False
    return bool(_DATE_BANNER_RE.fullmatch(core) or _LIVE_MARKER_RE.fullmatch(core))


def clean_content(text: str) -> str:
    """Return *text* with markup, navigation and banner boilerplate removed.

    Markdown images are dropped, markdown links collapse to their anchor
    text and inline HTML is reduced to its text. Skip-links, date-only banner
    lines, live-status markers and fundraising-appeal paragraphs are removed,
    and runs of blank lines collapse to a single blank line.
    """
    if not text:
        return ""

    cleaned = _MD_IMAGE_RE.sub("", text)
    # Repeat until stable so nested link syntax is fully unwrapped.
    previous = None
    while previous != cleaned:
        previous = cleaned
        cleaned = _MD_LINK_RE.sub(r"\1", cleaned)

    if _MARKUP_HINT_RE.search(cleaned):
        cleaned = _soup(cleaned).get_text()

    cleaned = _SKIP_LINK_RE.sub("", cleaned)
    cleaned = "\n".join(line for line in cleaned.split("\n") if not _is_banner_line(line))
    cleaned = _BARE_URL_LINE_RE.sub("", cleaned)

    paragraphs = re.split(r"\n[ \t]*\n", cleaned)
    cleaned = "\n\n".join(p for p in paragraphs if not _FUNDRAISING_RE.search(p))

    cleaned = _TRAILING_WS_RE.sub("", cleaned)
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, dropping empty chunks."""
    return [p.strip() for p in re.split(r"\n\s*\n", text or "") if p.strip()]
