"""Fixtures: settings, in-memory Supabase fake, scrape store."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

import pytest

from scrape_insight.config import Settings
from scrape_insight.store.supabase_store import SupabaseScrapeStore

API_KEY = "test-secret-key"
USER_TOKENS = {"token-alice": "user-alice", "token-bob": "user-bob"}


class FakeQuery:
    """Mimics the postgrest query builder chain used by the store."""

    def __init__(self, db: "FakeSupabaseClient", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._rows: list[dict[str, Any]] = []
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None

    def select(self, *_columns: str) -> "FakeQuery":
        self._op = "select"
        return self

    def insert(self, rows: dict[str, Any] | list[dict[str, Any]]) -> "FakeQuery":
        self._op = "insert"
        self._rows = rows if isinstance(rows, list) else [rows]
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(col) == val for col, val in self._filters)

    async def execute(self) -> SimpleNamespace:
        table = self._db.tables.setdefault(self._table, [])
        if self._op == "insert":
            stored = []
            for row in self._rows:
                self._db.clock += timedelta(seconds=1)
                record = {**row, "id": str(uuid.uuid4()), "created_at": self._db.clock.isoformat()}
                table.append(record)
                stored.append(dict(record))
            return SimpleNamespace(data=stored)
        if self._op == "delete":
            removed = [row for row in table if self._matches(row)]
            self._db.tables[self._table] = [row for row in table if not self._matches(row)]
            return SimpleNamespace(data=removed)
        rows = [dict(row) for row in table if self._matches(row)]
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: r[column], reverse=desc)
        return SimpleNamespace(data=rows)


class FakeAuth:
    async def get_user(self, token: str) -> SimpleNamespace:
        if token not in USER_TOKENS:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=USER_TOKENS[token]))


class FakeSupabaseClient:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key=API_KEY,
        firecrawl_api_key="test-firecrawl",
        gemini_api_key="",
        supabase_url="",
        supabase_key="",
    )  # type: ignore[call-arg]


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def scrape_store(supabase_client: FakeSupabaseClient) -> SupabaseScrapeStore:
    """SupabaseScrapeStore backed by an in-memory fake client."""
    return SupabaseScrapeStore(supabase_client, table="scrapes")  # type: ignore[arg-type]
