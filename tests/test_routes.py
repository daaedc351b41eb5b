"""HTTP endpoint tests for /scrape and /scrapes."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scrape_insight.analysis import ContentAnalyzer
from scrape_insight.api.routes import router
from scrape_insight.config import Settings, get_settings
from scrape_insight.errors import StoreError
from scrape_insight.pipeline import ScrapePipeline
from scrape_insight.scrape import FetchedPage
from scrape_insight.store.supabase_store import SupabaseScrapeStore

PAGE = FetchedPage(
    url="https://example.com/tesla",
    title="Tesla",
    markdown=(
        "Tesla opened a new plant near Berlin to build more cars.\n\n"
        "Other unrelated news continues in the second paragraph."
    ),
)

ALICE = {"Authorization": "Bearer token-alice"}
BOB = {"Authorization": "Bearer token-bob"}


@pytest.fixture
def loader() -> MagicMock:
    mock = MagicMock()
    mock.load = AsyncMock(return_value=PAGE)
    return mock


@pytest.fixture
def client(settings: Settings, loader: MagicMock, scrape_store: SupabaseScrapeStore) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.pipeline = ScrapePipeline(loader, ContentAnalyzer(settings), settings)
    app.state.store = scrape_store
    client = TestClient(app)
    client.headers["X-API-Key"] = settings.api_key
    return client


def _scrape(client: TestClient) -> dict:
    resp = client.post(
        "/scrape",
        json={"url": "https://example.com/tesla", "keywords": ["Tesla"], "useModelAnalysis": False},
    )
    assert resp.status_code == 200
    return resp.json()["data"]


class TestScrapeEndpoint:
    def test_requires_api_key(self, client: TestClient) -> None:
        resp = client.post("/scrape", json={"url": "https://example.com"}, headers={"X-API-Key": "nope"})
        assert resp.status_code == 401

    def test_success_envelope(self, client: TestClient) -> None:
        resp = client.post(
            "/scrape",
            json={"url": "https://example.com/tesla", "keywords": ["Tesla"], "useModelAnalysis": False},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["outcome"] == "analyzed"
        assert body["error"] is None
        data = body["data"]
        assert data["url"] == "https://example.com/tesla"
        assert data["title"] == "Tesla"
        assert data["id"] is None
        assert data["analysis_source"] == "fallback"
        assert PAGE.markdown.startswith(data["short_summary"])

    def test_snake_case_flag_accepted(self, client: TestClient) -> None:
        resp = client.post(
            "/scrape",
            json={"url": "https://example.com/tesla", "use_model_analysis": False},
        )
        assert resp.status_code == 200
        assert resp.json()["success"] is True

    def test_invalid_url_envelope(self, client: TestClient, loader: MagicMock) -> None:
        resp = client.post("/scrape", json={"url": "example.com"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Please enter a valid URL (include http:// or https://)"
        loader.load.assert_not_called()

    def test_missing_url_envelope(self, client: TestClient) -> None:
        resp = client.post("/scrape", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "URL is required"

    def test_no_match_envelope(self, client: TestClient) -> None:
        resp = client.post(
            "/scrape",
            json={"url": "https://example.com/tesla", "keywords": ["Volkswagen"]},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["outcome"] == "no_match"
        assert body["data"] is None
        assert body["no_match"]["keywords"] == ["Volkswagen"]


class TestScrapesEndpoints:
    def test_requires_access_token(self, client: TestClient) -> None:
        resp = client.get("/scrapes")
        assert resp.status_code == 401

    def test_save_list_delete(self, client: TestClient) -> None:
        result = _scrape(client)

        resp = client.post("/scrapes", json=result, headers=ALICE)
        assert resp.status_code == 201
        saved = resp.json()["data"]
        assert saved["id"]
        assert saved["created_at"]
        assert saved["user_id"] == "user-alice"
        assert saved["ai_summary"] == result["ai_summary"]

        resp = client.get("/scrapes", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": [saved]}

        resp = client.get("/scrapes", headers=BOB)
        assert resp.json()["data"] == []

        resp = client.delete(f"/scrapes/{saved['id']}", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert client.get("/scrapes", headers=ALICE).json()["data"] == []

    def test_delete_other_users_scrape_leaves_it(self, client: TestClient) -> None:
        saved = client.post("/scrapes", json=_scrape(client), headers=ALICE).json()["data"]

        resp = client.delete(f"/scrapes/{saved['id']}", headers=BOB)
        assert resp.status_code == 200
        assert len(client.get("/scrapes", headers=ALICE).json()["data"]) == 1

    def test_save_rejects_out_of_range_score(self, client: TestClient) -> None:
        result = _scrape(client)
        result["relevance_score"] = 11
        resp = client.post("/scrapes", json=result, headers=ALICE)
        assert resp.status_code == 422

    def test_store_failure_is_bad_gateway(self, client: TestClient, scrape_store: SupabaseScrapeStore) -> None:
        scrape_store.list_for_user = AsyncMock(side_effect=StoreError("Failed to fetch scrapes from database"))
        resp = client.get("/scrapes", headers=ALICE)
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to fetch scrapes from database"


class TestNullRequestFields:
    def test_null_url_gets_envelope(self, client: TestClient, loader: MagicMock) -> None:
        resp = client.post("/scrape", json={"url": None})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "URL is required"
        loader.load.assert_not_called()

    def test_null_keywords_treated_as_empty(self, client: TestClient) -> None:
        resp = client.post(
            "/scrape",
            json={"url": "https://example.com/tesla", "keywords": None, "useModelAnalysis": False},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["outcome"] == "analyzed"
        assert body["data"]["keywords"] == []
