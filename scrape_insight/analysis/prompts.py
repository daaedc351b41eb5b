"""Prompt template for the page analysis call."""

from datetime import date

NO_MATCH_SENTINEL = "NO_RELEVANT_CONTENT"

# Placeholders the model sometimes echoes back verbatim instead of filling in.
LINKEDIN_PLACEHOLDER = "[Professional LinkedIn post, 3-5 sentences, with 3 relevant hashtags]"
TWITTER_PLACEHOLDER = "[Tweet under 280 characters with 2 hashtags]"
INSTAGRAM_PLACEHOLDER = "[Engaging Instagram caption with emojis and 5 hashtags]"
FACEBOOK_PLACEHOLDER = "[Conversational Facebook post, 2-4 sentences, ending with a question]"

SOCIAL_PLACEHOLDERS = (
    LINKEDIN_PLACEHOLDER,
    TWITTER_PLACEHOLDER,
    INSTAGRAM_PLACEHOLDER,
    FACEBOOK_PLACEHOLDER,
)

KEYWORD_FOCUS = """\
Focus ONLY on information related to these keywords: {keywords}.
Ignore navigation, advertising and any content unrelated to the keywords.
If the page contains nothing relevant to the keywords, reply with exactly \
{sentinel} and nothing else.
"""

GENERIC_FOCUS = """\
Analyze the main content of the page. Ignore navigation, advertising, cookie \
banners and other boilerplate.
"""

ANALYSIS_PROMPT = """\
You are a research analyst summarizing a web page.

{focus}
URL: {url}
Title: {title}
Current date: {date}

Content:
\"\"\"{content}\"\"\"

Respond using exactly these section headers, in this order:

**SOURCE SUMMARY:**
A detailed summary of the content in 2-3 paragraphs.

**SHORT SUMMARY:**
One or two sentences capturing the essence of the content.

**KEY HIGHLIGHTS:**
8-10 numbered bullet points with the most important facts, figures and quotes.

**VERIFIED ORIGIN:**
The historical background and origin of the topic: when, where and how it started.

**FUTURE FORECAST:**
The current state of the topic and a reasoned forecast of how it is likely to develop.
{score_section}
**LINKEDIN POST:**
{linkedin}

**TWITTER POST:**
{twitter}

**INSTAGRAM CAPTION:**
{instagram}

**FACEBOOK POST:**
{facebook}
"""

SCORE_SECTION = """
**RELEVANCE SCORE:**
Score: N/10 (how relevant the content is to the keywords), followed by one \
sentence of justification.
"""


def format_analysis_prompt(
    content: str,
    keywords: list[str],
    url: str,
    title: str = "",
    max_chars: int = 10000,
) -> str:
    if keywords:
        focus = KEYWORD_FOCUS.format(
            keywords=", ".join(keywords),
            sentinel=NO_MATCH_SENTINEL,
        )
        score_section = SCORE_SECTION
    else:
        focus = GENERIC_FOCUS
        score_section = ""
    return ANALYSIS_PROMPT.format(
        focus=focus,
        url=url,
        title=title or "(untitled)",
        date=date.today().isoformat(),
        content=content[:max_chars],
        score_section=score_section,
        linkedin=LINKEDIN_PLACEHOLDER,
        twitter=TWITTER_PLACEHOLDER,
        instagram=INSTAGRAM_PLACEHOLDER,
        facebook=FACEBOOK_PLACEHOLDER,
    )
