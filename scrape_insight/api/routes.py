"""POST /scrape and /scrapes CRUD endpoint handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from scrape_insight.api.schemas import (
    SaveScrapeResponse,
    ScrapeListResponse,
    ScrapeRequest,
    ScrapeResponse,
    ScrapeResult,
)
from scrape_insight.auth.dependencies import get_store, require_api_key, require_user
from scrape_insight.errors import StoreError
from scrape_insight.pipeline import ScrapePipeline
from scrape_insight.store.supabase_store import SupabaseScrapeStore

router = APIRouter(dependencies=[Depends(require_api_key)])


def _get_pipeline(request: Request) -> ScrapePipeline:
    return request.app.state.pipeline


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape_website(
    body: ScrapeRequest,
    pipeline: ScrapePipeline = Depends(_get_pipeline),
):
    outcome = await pipeline.run(
        url=body.url,
        keywords=body.keywords,
        use_model_analysis=body.use_model_analysis,
    )
    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.response.model_dump(mode="json"),
    )


@router.get("/scrapes", response_model=ScrapeListResponse)
async def list_scrapes(
    user_id: str = Depends(require_user),
    store: SupabaseScrapeStore = Depends(get_store),
):
    try:
        rows = await store.list_for_user(user_id)
    except StoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ScrapeListResponse(data=rows)


@router.post("/scrapes", response_model=SaveScrapeResponse, status_code=201)
async def save_scrape(
    body: ScrapeResult,
    user_id: str = Depends(require_user),
    store: SupabaseScrapeStore = Depends(get_store),
):
    try:
        stored = await store.insert(body, user_id)
    except StoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return SaveScrapeResponse(data=stored)


@router.delete("/scrapes/{scrape_id}")
async def delete_scrape(
    scrape_id: str,
    user_id: str = Depends(require_user),
    store: SupabaseScrapeStore = Depends(get_store),
):
    try:
        await store.delete(scrape_id, user_id)
    except StoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"success": True}
