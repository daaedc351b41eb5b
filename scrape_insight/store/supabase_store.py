"""Supabase-backed storage for saved scrape results."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import httpx
from supabase import AsyncClient, PostgrestAPIError, acreate_client

from scrape_insight.api.schemas import ScrapeResult
from scrape_insight.errors import ConfigurationError, StoreError

logger = logging.getLogger(__name__)

# Columns the database fills in; never sent on insert.
_SERVER_COLUMNS = {"id", "created_at"}


def _from_row(row: dict[str, Any]) -> ScrapeResult:
    # NULL json/array columns fall back to the model defaults.
    return ScrapeResult.model_validate({k: v for k, v in row.items() if v is not None})


class SupabaseScrapeStore:
    """Thin async wrapper around the ``scrapes`` table, scoped by ``user_id``."""

    def __init__(self, client: AsyncClient, table: str = "scrapes") -> None:
        self._client = client
        self._table = table

    async def insert(self, result: ScrapeResult, user_id: str) -> ScrapeResult:
        """Store *result* for *user_id* and return the row with its id/timestamp."""
        row = result.model_dump(mode="json", exclude=_SERVER_COLUMNS)
        row["user_id"] = user_id
        try:
            response = await self._client.table(self._table).insert(row).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            logger.warning("scrape insert failed", extra={"user_id": user_id, "url": result.url}, exc_info=True)
            raise StoreError("Failed to save scrape to database") from exc

        if not response.data:
            raise StoreError("Failed to save scrape to database")
        stored = _from_row(response.data[0])
        logger.info("scrape saved", extra={"user_id": user_id, "scrape_id": stored.id})
        return stored

    async def list_for_user(self, user_id: str) -> list[ScrapeResult]:
        """Return every scrape owned by *user_id*, newest first."""
        try:
            response = await (
                self._client.table(self._table)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            logger.warning("scrape list failed", extra={"user_id": user_id}, exc_info=True)
            raise StoreError("Failed to fetch scrapes from database") from exc

        rows = response.data or []
        logger.debug("scrapes listed", extra={"user_id": user_id, "count": len(rows)})
        return [_from_row(row) for row in rows]

    async def delete(self, scrape_id: str, user_id: str) -> None:
        """Delete *scrape_id* if *user_id* owns it; a missing row is not an error."""
        try:
            response = await (
                self._client.table(self._table)
                .delete()
                .eq("id", scrape_id)
                .eq("user_id", user_id)
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            logger.warning(
                "scrape delete failed",
                extra={"user_id": user_id, "scrape_id": scrape_id},
                exc_info=True,
            )
            raise StoreError("Failed to delete scrape from database") from exc
        logger.info(
            "scrape delete",
            extra={"user_id": user_id, "scrape_id": scrape_id, "deleted": len(response.data or [])},
        )

    async def get_user_id(self, access_token: str) -> str | None:
        """Resolve a Supabase access token to its user id, or ``None`` if invalid."""
        try:
            response = await self._client.auth.get_user(access_token)
        except Exception:
            logger.info("access token rejected", exc_info=True)
            return None
        user = getattr(response, "user", None)
        return str(user.id) if user is not None else None


async def create_supabase_client(supabase_url: str, supabase_key: str) -> AsyncClient:
    if not supabase_url or not supabase_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must both be set")
    logger.info("connecting to supabase", extra={"supabase_host": urlparse(supabase_url).hostname})
    return await acreate_client(supabase_url, supabase_key)
