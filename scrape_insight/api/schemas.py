"""Request/response Pydantic models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScrapeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Validated by the pipeline so a bad URL still gets the {success, error} envelope.
    url: str | None = None
    keywords: list[str] | None = None
    use_model_analysis: bool = Field(default=True, alias="useModelAnalysis")


class LinkItem(BaseModel):
    url: str
    text: str = ""
    type: str | None = None


class HighlightItem(BaseModel):
    text: str
    importance: int | str = "medium"

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("highlight text must not be empty")
        return value


class OgData(BaseModel):
    title: str = ""
    description: str = ""
    image: str = ""
    url: str = ""


class SocialPosts(BaseModel):
    linkedin: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    facebook: str | None = None


class ScrapeResult(BaseModel):
    id: str | None = None
    created_at: datetime | None = None
    user_id: str | None = None

    url: str
    title: str = ""
    meta_description: str = ""
    keywords: list[str] = []
    links: list[LinkItem] = []
    highlighted_content: list[HighlightItem] = []
    og_data: OgData = OgData()
    raw_content: str = ""

    ai_summary: str = ""
    short_summary: str | None = None
    verified_origin: str = ""
    future_forecast: str = ""
    relevance_score: float | None = Field(default=None, ge=0, le=10)
    social_posts: SocialPosts = SocialPosts()
    key_highlights: list[str] | None = None
    analysis_source: Literal["model", "fallback"] = "fallback"


class NoMatchDetail(BaseModel):
    url: str
    keywords: list[str]
    message: str


class ScrapeResponse(BaseModel):
    success: bool
    outcome: Literal["analyzed", "no_match"] | None = None
    data: ScrapeResult | None = None
    no_match: NoMatchDetail | None = None
    error: str | None = None


class SaveScrapeResponse(BaseModel):
    success: bool = True
    data: ScrapeResult


class ScrapeListResponse(BaseModel):
    success: bool = True
    data: list[ScrapeResult] = []
