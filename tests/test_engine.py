"""Content analyzer unit tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from scrape_insight.analysis.engine import ContentAnalyzer
from scrape_insight.analysis.fallback import summarize
from scrape_insight.analysis.prompts import NO_MATCH_SENTINEL, format_analysis_prompt
from scrape_insight.config import Settings

CONTENT = (
    "Tesla opened a new plant near Berlin to build more cars. It employs thousands.\n\n"
    "The factory produces the Model Y and batteries for the European market."
)
URL = "https://example.com/tesla"

MODEL_REPLY = """\
**SOURCE SUMMARY:** Tesla runs a plant near Berlin.
**SHORT SUMMARY:** Berlin plant.
**KEY HIGHLIGHTS:**
1. Plant near Berlin.
2. Builds Model Y.
**RELEVANCE SCORE:** Score: 9/10
"""


def _settings(**overrides) -> Settings:
    defaults = dict(
        api_key="test-key",
        gemini_api_key="test-gemini",
        gemini_model="gemini-2.0-flash",
        gemini_temperature=0.3,
        gemini_max_output_tokens=2048,
    )
    defaults.update(overrides)
    return Settings(**defaults)  # type: ignore[arg-type]


def _mock_agent(reply=None, side_effect=None) -> MagicMock:
    agent = MagicMock()
    usage = SimpleNamespace(input_tokens=120, output_tokens=80)
    agent.run = AsyncMock(
        return_value=SimpleNamespace(output=reply, usage=lambda: usage),
        side_effect=side_effect,
    )
    return agent


# --- prompt ---


def test_prompt_with_keywords_includes_focus_and_score():
    prompt = format_analysis_prompt(CONTENT, ["Tesla", "Berlin"], URL, title="Tesla Berlin")
    assert "Tesla, Berlin" in prompt
    assert NO_MATCH_SENTINEL in prompt
    assert "**RELEVANCE SCORE:**" in prompt
    assert URL in prompt
    assert "Tesla Berlin" in prompt
    for header in ("SOURCE SUMMARY", "SHORT SUMMARY", "KEY HIGHLIGHTS", "VERIFIED ORIGIN",
                   "FUTURE FORECAST", "LINKEDIN POST", "TWITTER POST", "INSTAGRAM CAPTION",
                   "FACEBOOK POST"):
        assert f"**{header}:**" in prompt


def test_prompt_without_keywords_is_generic():
    prompt = format_analysis_prompt(CONTENT, [], URL)
    assert "Analyze the main content" in prompt
    assert "RELEVANCE SCORE" not in prompt
    assert NO_MATCH_SENTINEL not in prompt


def test_prompt_truncates_content():
    prompt = format_analysis_prompt("x" * 20000, [], URL, max_chars=10000)
    assert "x" * 10000 in prompt
    assert "x" * 10001 not in prompt


# --- ContentAnalyzer ---


@pytest.fixture
def agent_cls():
    with (
        patch("scrape_insight.analysis.engine.GoogleProvider") as mock_provider_cls,
        patch("scrape_insight.analysis.engine.GoogleModel") as mock_model_cls,
        patch("scrape_insight.analysis.engine.Agent") as mock_agent_cls,
    ):
        mock_agent_cls.provider_cls = mock_provider_cls
        mock_agent_cls.model_cls = mock_model_cls
        yield mock_agent_cls


def test_no_api_key_means_no_agent(agent_cls):
    analyzer = ContentAnalyzer(_settings(gemini_api_key=""))
    assert analyzer.model_available is False
    agent_cls.assert_not_called()


def test_agent_built_for_configured_model(agent_cls):
    analyzer = ContentAnalyzer(_settings())
    assert analyzer.model_available is True
    agent_cls.provider_cls.assert_called_once_with(api_key="test-gemini")
    agent_cls.model_cls.assert_called_once_with(
        "gemini-2.0-flash", provider=agent_cls.provider_cls.return_value
    )
    agent_cls.assert_called_once_with(agent_cls.model_cls.return_value)


@pytest.mark.asyncio
async def test_missing_key_uses_fallback(agent_cls):
    analyzer = ContentAnalyzer(_settings(gemini_api_key=""))
    result = await analyzer.analyze(CONTENT, ["Tesla"], URL, title="Tesla")
    assert result == summarize(CONTENT, ["Tesla"], title="Tesla", url=URL)


@pytest.mark.asyncio
async def test_deterministic_mode_skips_model(agent_cls):
    agent = _mock_agent(MODEL_REPLY)
    agent_cls.return_value = agent
    analyzer = ContentAnalyzer(_settings())

    result = await analyzer.analyze(CONTENT, [], URL, use_model=False)

    assert result.source == "fallback"
    agent.run.assert_not_called()


@pytest.mark.asyncio
async def test_model_reply_parsed(agent_cls):
    agent = _mock_agent(MODEL_REPLY)
    agent_cls.return_value = agent
    analyzer = ContentAnalyzer(_settings())

    result = await analyzer.analyze(CONTENT, ["Tesla"], URL, title="Tesla")

    assert result.source == "model"
    assert result.summary == "Tesla runs a plant near Berlin."
    assert result.short_summary == "Berlin plant."
    assert result.highlights == ["Plant near Berlin.", "Builds Model Y."]
    assert result.relevance_score == 9.0

    agent.run.assert_awaited_once()
    prompt = agent.run.call_args.args[0]
    assert URL in prompt
    assert agent.run.call_args.kwargs["model_settings"] == {"temperature": 0.3, "max_tokens": 2048}


@pytest.mark.asyncio
async def test_api_error_falls_back(agent_cls):
    agent = _mock_agent(side_effect=RuntimeError("429 quota exceeded"))
    agent_cls.return_value = agent
    analyzer = ContentAnalyzer(_settings())

    result = await analyzer.analyze(CONTENT, ["Tesla"], URL)

    assert result == summarize(CONTENT, ["Tesla"], url=URL)
    assert agent.run.await_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [None, "", "   "])
async def test_empty_reply_falls_back(agent_cls, reply):
    agent_cls.return_value = _mock_agent(reply)
    analyzer = ContentAnalyzer(_settings())

    result = await analyzer.analyze(CONTENT, [], URL)

    assert result.source == "fallback"


@pytest.mark.asyncio
async def test_no_match_sentinel_falls_back(agent_cls):
    agent_cls.return_value = _mock_agent(f"{NO_MATCH_SENTINEL}\n")
    analyzer = ContentAnalyzer(_settings())

    result = await analyzer.analyze(CONTENT, ["Volkswagen"], URL)

    assert result.source == "fallback"
    assert result.summary == summarize(CONTENT, ["Volkswagen"], url=URL).summary


@pytest.mark.asyncio
async def test_generate_without_agent_returns_empty(agent_cls):
    analyzer = ContentAnalyzer(_settings(gemini_api_key=""))
    assert await analyzer._generate("prompt", URL) == ""
