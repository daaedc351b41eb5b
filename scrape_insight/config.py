"""Pydantic Settings: loads configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    api_key: str

    firecrawl_api_key: str = ""
    firecrawl_api_url: str = ""
    firecrawl_exclude_tags: list[str] = [
        "nav",
        "footer",
        "header",
        "aside",
        "script",
        "style",
        "form",
        "iframe",
        "noscript",
    ]

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.3
    gemini_max_output_tokens: int = 2048

    analysis_max_chars: int = 10000
    raw_content_max_chars: int = 2000

    supabase_url: str = ""
    supabase_key: str = ""
    supabase_table: str = "scrapes"

    cors_allow_origins: list[str] = ["*"]
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
