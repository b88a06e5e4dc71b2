"""Tests for API routes."""
from __future__ import annotations

import json
import random
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pressroom.agents.scorer import RandomScorer
from pressroom.errors import QuotaExceededError
from pressroom.models.schemas import SearchConfig, SearchHistoryEntry, ShareResponse, UsageLimits
from pressroom.services.enricher import Enricher
from pressroom.tools.mock_search import SyntheticSearchProvider
from pressroom.tools.search_provider import SearchOrchestrator


@pytest.fixture
def app():
    from pressroom.api import deps
    from pressroom.main import app

    app.dependency_overrides[deps.get_orchestrator] = lambda: SearchOrchestrator(
        [], fallback=SyntheticSearchProvider(random.Random(1))
    )
    app.dependency_overrides[deps.get_scorer] = lambda: RandomScorer(random.Random(2))
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def authed_app(app):
    from pressroom.api import deps

    app.dependency_overrides[deps.get_current_user] = lambda: "user-1"
    return app


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def authed_client(authed_app):
    from fastapi.testclient import TestClient
    return TestClient(authed_app)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "pressroom"


# --- Auth ---


def test_search_without_token_is_unauthorized(client):
    response = client.post("/api/search", json={"query": "Radiohead"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_invalid_token_is_unauthorized(client):
    with patch("pressroom.services.supabase.get_user_id", new=AsyncMock(return_value=None)):
        response = client.get("/api/usage", headers={"Authorization": "Bearer bad-token"})
    assert response.status_code == 401


def test_auth_errors_are_unauthorized(client):
    with patch(
        "pressroom.services.supabase.get_user_id",
        new=AsyncMock(side_effect=RuntimeError("invalid JWT")),
    ):
        response = client.get("/api/history", headers={"Authorization": "Bearer bad-token"})
    assert response.status_code == 401


def test_valid_token_resolves_user(client):
    limits = {
        "searches_this_month": 1,
        "max_searches": 50,
        "exports_this_month": 0,
        "max_exports": 20,
        "last_reset": "2024-03-01T00:00:00+00:00",
    }

    with (
        patch("pressroom.services.supabase.get_user_id", new=AsyncMock(return_value="user-9")),
        patch(
            "pressroom.services.usage.get_limits",
            new=AsyncMock(return_value=UsageLimits(**limits)),
        ) as get_limits,
    ):
        response = client.get("/api/usage", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    assert response.json()["limits"]["searchesThisMonth"] == 1
    get_limits.assert_awaited_once_with("user-9")


# --- Search ---


def test_search_returns_unanalysed_results(authed_client):
    with (
        patch("pressroom.services.usage.check_searches", new=AsyncMock()) as quota,
        patch("pressroom.services.usage.record_search", new=AsyncMock()) as record,
        patch(
            "pressroom.services.history.save_search", new=AsyncMock(return_value="search-1")
        ) as save,
    ):
        response = authed_client.post("/api/search", json={"query": "Radiohead", "maxResults": 5})

    assert response.status_code == 200
    data = response.json()
    assert data["searchId"] == "search-1"
    assert data["provider"] == "synthetic"
    assert len(data["results"]) == 5
    for result in data["results"]:
        assert result["analysis"] is None
        assert result["isAnalyzing"] is False
        assert result["contentType"] in {"article", "review", "interview", "news", "feature"}
    quota.assert_awaited_once_with("user-1")
    record.assert_awaited_once()
    save.assert_awaited_once()


def test_search_quota_exceeded(authed_client):
    with (
        patch(
            "pressroom.services.usage.check_searches",
            new=AsyncMock(side_effect=QuotaExceededError("searches", 50)),
        ),
        patch("pressroom.services.usage.record_search", new=AsyncMock()) as record,
    ):
        response = authed_client.post("/api/search", json={"query": "Radiohead"})

    assert response.status_code == 429
    assert response.json() == {"error": "Search limit reached", "limit": 50}
    record.assert_not_awaited()


def test_failed_search_is_not_charged(authed_app):
    from fastapi.testclient import TestClient

    from pressroom.api import deps

    broken = SearchOrchestrator([])
    broken.search = AsyncMock(side_effect=RuntimeError("template bug"))
    authed_app.dependency_overrides[deps.get_orchestrator] = lambda: broken

    with (
        patch("pressroom.services.usage.check_searches", new=AsyncMock()) as quota,
        patch("pressroom.services.usage.record_search", new=AsyncMock()) as record,
    ):
        response = TestClient(authed_app).post("/api/search", json={"query": "Radiohead"})

    assert response.status_code == 500
    assert response.json() == {"error": "Search failed"}
    quota.assert_awaited_once_with("user-1")
    record.assert_not_awaited()


def test_search_rejects_inverted_dates(authed_client):
    response = authed_client.post(
        "/api/search",
        json={"query": "Radiohead", "dateFrom": "2024-02-01", "dateTo": "2024-01-01"},
    )

    assert response.status_code == 422
    details = response.json()["details"]
    assert any("Start date must be before or equal to end date" in d for d in details)


def test_search_still_returns_results_when_history_write_fails(authed_client):
    with (
        patch("pressroom.services.usage.check_searches", new=AsyncMock()),
        patch("pressroom.services.usage.record_search", new=AsyncMock()),
        patch(
            "pressroom.services.history.save_search",
            new=AsyncMock(side_effect=RuntimeError("db down")),
        ),
    ):
        response = authed_client.post("/api/search", json={"query": "Radiohead", "maxResults": 3})

    assert response.status_code == 200
    assert response.json()["searchId"] is None


# --- Analysis stream ---


@pytest.fixture
def stream_entry(make_result):
    return SearchHistoryEntry(
        id="search-1",
        user_id="user-1",
        query="Radiohead",
        config=SearchConfig(query="Radiohead"),
        result_count=2,
        results=[make_result(0), make_result(1)],
    )


def _parse_sse(body: str) -> list[tuple[str, dict]]:
    events = []
    for block in body.replace("\r\n", "\n").split("\n\n"):
        name, data = None, None
        for line in block.splitlines():
            if line.startswith("event:"):
                name = line[len("event:"):].strip()
            elif line.startswith("data:"):
                data = json.loads(line[len("data:"):].strip())
        if name:
            events.append((name, data))
    return events


def test_stream_analysis_emits_events_and_persists(authed_app, stream_entry):
    from fastapi.testclient import TestClient

    from pressroom.api import deps

    authed_app.dependency_overrides[deps.get_enricher] = lambda: Enricher(
        RandomScorer(random.Random(3))
    )

    with (
        patch("pressroom.services.history.get_entry", new=AsyncMock(return_value=stream_entry)),
        patch("pressroom.services.history.save_results", new=AsyncMock()) as save,
    ):
        response = TestClient(authed_app).get("/api/search/search-1/stream")

    assert response.status_code == 200
    events = _parse_sse(response.text)
    names = [name for name, _ in events]
    assert names == [
        "analysis_started",
        "analysis_result",
        "analysis_progress",
        "analysis_started",
        "analysis_result",
        "analysis_progress",
        "analysis_complete",
    ]
    assert events[-1][1]["completed"] == 2
    assert events[1][1]["result"]["analysis"] is not None

    save.assert_awaited_once()
    saved_results = save.await_args.args[2]
    assert all(r.analysis is not None for r in saved_results)


def test_stream_of_analysed_search_does_not_rescore(authed_app, stream_entry, make_analysis):
    from fastapi.testclient import TestClient

    from pressroom.api import deps

    analysed = stream_entry.model_copy(
        update={
            "results": [
                r.model_copy(update={"analysis": make_analysis(summary="first")})
                for r in stream_entry.results
            ]
        }
    )
    scorer = MagicMock(score=AsyncMock())
    authed_app.dependency_overrides[deps.get_enricher] = lambda: Enricher(scorer)

    with (
        patch("pressroom.services.history.get_entry", new=AsyncMock(return_value=analysed)),
        patch("pressroom.services.history.save_results", new=AsyncMock()) as save,
    ):
        response = TestClient(authed_app).get("/api/search/search-1/stream")

    assert response.status_code == 200
    events = _parse_sse(response.text)
    assert [name for name, _ in events] == ["analysis_complete"]
    assert events[0][1]["completed"] == 2
    assert events[0][1]["progress"] == 1.0
    scorer.score.assert_not_awaited()
    save.assert_not_awaited()



# --- Analyze ---


def test_analyze_single_result(authed_client, make_result):
    body = {"result": make_result().model_dump(mode="json", by_alias=True)}
    response = authed_client.post("/api/analyze", json=body)

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert 70 <= analysis["relevanceScore"] <= 99
    assert analysis["sentiment"] in {"positive", "neutral", "negative", "mixed"}


# --- Share / history ---


def test_share_search(authed_client):
    share = ShareResponse(share_token="a" * 32, share_url=f"http://localhost:3000/shared/{'a' * 32}")
    with patch("pressroom.services.history.share", new=AsyncMock(return_value=share)) as share_mock:
        response = authed_client.post("/api/share", json={"searchId": "search-1"})

    assert response.status_code == 200
    assert response.json()["shareToken"] == "a" * 32
    share_mock.assert_awaited_once_with("search-1", "user-1")


def test_unshare_search(authed_client):
    with patch("pressroom.services.history.unshare", new=AsyncMock()) as unshare:
        response = authed_client.delete("/api/share", params={"id": "search-1"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    unshare.assert_awaited_once_with("search-1", "user-1")


def test_shared_search_is_public(client, stream_entry):
    shared = stream_entry.model_copy(update={"shared": True, "share_token": "b" * 32})
    with patch("pressroom.services.history.get_shared", new=AsyncMock(return_value=shared)):
        response = client.get(f"/api/shared/{'b' * 32}")

    assert response.status_code == 200
    assert response.json()["query"] == "Radiohead"


def test_unknown_shared_search_is_not_found(client):
    with patch("pressroom.services.supabase.get_shared_search", new=AsyncMock(return_value=None)):
        response = client.get(f"/api/shared/{'c' * 32}")

    assert response.status_code == 404
    assert response.json() == {"error": "Shared search not found"}


def test_list_history(authed_client, stream_entry):
    with patch(
        "pressroom.services.history.list_history", new=AsyncMock(return_value=[stream_entry])
    ):
        response = authed_client.get("/api/history")

    assert response.status_code == 200
    assert response.json()["history"][0]["id"] == "search-1"


def test_delete_history(authed_client):
    with patch("pressroom.services.history.delete_entry", new=AsyncMock()) as delete:
        response = authed_client.delete("/api/history/search-1")

    assert response.status_code == 200
    delete.assert_awaited_once_with("search-1", "user-1")


# --- Export ---


def test_export_csv_applies_filters(authed_client, make_result, make_analysis):
    results = [
        make_result(0, analysis=make_analysis()),
        make_result(1),
    ]
    body = {
        "results": [r.model_dump(mode="json", by_alias=True) for r in results],
        "format": "csv",
        "sentimentFilter": "positive",
    }
    with (
        patch("pressroom.services.usage.check_exports", new=AsyncMock()) as quota,
        patch("pressroom.services.usage.record_export", new=AsyncMock()) as record,
    ):
        response = authed_client.post("/api/export", json=body)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert len(lines) == 2
    quota.assert_awaited_once_with("user-1")
    record.assert_awaited_once()


def test_export_with_nothing_to_export_is_rejected(authed_client, make_result):
    body = {
        "results": [make_result().model_dump(mode="json", by_alias=True)],
        "format": "json",
        "sentimentFilter": "negative",
    }
    with patch("pressroom.services.usage.check_exports", new=AsyncMock()) as quota:
        response = authed_client.post("/api/export", json=body)

    assert response.status_code == 422
    quota.assert_not_awaited()


def test_export_quota_exceeded(authed_client, make_result):
    body = {"results": [make_result().model_dump(mode="json", by_alias=True)], "format": "json"}
    with (
        patch(
            "pressroom.services.usage.check_exports",
            new=AsyncMock(side_effect=QuotaExceededError("exports", 20)),
        ),
        patch("pressroom.services.usage.record_export", new=AsyncMock()) as record,
    ):
        response = authed_client.post("/api/export", json=body)

    assert response.status_code == 429
    assert response.json() == {"error": "Export limit reached", "limit": 20}
    record.assert_not_awaited()
