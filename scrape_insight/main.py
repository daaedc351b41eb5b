"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrape_insight.analysis import ContentAnalyzer
from scrape_insight.api.routes import router
from scrape_insight.config import get_settings
from scrape_insight.errors import ConfigurationError
from scrape_insight.logging_config import setup_logging
from scrape_insight.pipeline import ScrapePipeline
from scrape_insight.scrape import FirecrawlLoader
from scrape_insight.store.supabase_store import SupabaseScrapeStore, create_supabase_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting scrape-insight service")

    # Missing upstream credentials disable the affected stage, not the service.
    try:
        loader = FirecrawlLoader(
            api_key=settings.firecrawl_api_key,
            api_url=settings.firecrawl_api_url,
            exclude_tags=settings.firecrawl_exclude_tags,
        )
    except ConfigurationError:
        logger.error("FIRECRAWL_API_KEY not set, /scrape will return 503")
        loader = None

    try:
        client = await create_supabase_client(settings.supabase_url, settings.supabase_key)
        store = SupabaseScrapeStore(client, table=settings.supabase_table)
    except ConfigurationError:
        logger.warning("supabase not configured, /scrapes endpoints will return 503")
        store = None

    analyzer = ContentAnalyzer(settings)

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.pipeline = ScrapePipeline(loader, analyzer, settings)
    app.state.store = store

    logger.info(
        "scrape-insight service ready",
        extra={
            "firecrawl_configured": loader is not None,
            "gemini_model": settings.gemini_model if analyzer.model_available else None,
            "supabase_configured": store is not None,
        },
    )

    yield

    logger.info("shutting down scrape-insight service")


async def health():
    return {"status": "ok"}


def create_app() -> FastAPI:
    """Build the app; run with ``uvicorn scrape_insight.main:create_app --factory``.

    Settings are read here rather than at import because the CORS origins
    must be known before the middleware stack is built.
    """
    settings = get_settings()
    app = FastAPI(title="Scrape Insight", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key", "X-Client-Info", "Apikey"],
    )
    app.include_router(router)
    app.add_api_route("/health", health, methods=["GET"])
    return app
