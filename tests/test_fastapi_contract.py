"""
FastAPI contract tests.

The real ResearchOrchestrator is wired with in-memory fakes through
dependency overrides, so no provider, engine or archive is contacted.
"""

import pytest
from fastapi.testclient import TestClient

from fakes import (
    FakeArchiveAdapter,
    FakeClock,
    FakeSnapshotSearch,
    FakeWebAggregator,
    ScriptedClient,
    archive_record,
    make_spec,
)
from models.source import Source, SourceType
from orchestrator.core import ResearchOrchestrator
from orchestrator.provider_router import AIProviderRouter
from server.app import create_app
from tools.archive.archival_search import ArchivalSearchService

pytestmark = pytest.mark.integration


@pytest.fixture()
def orchestrator(store):
    router = AIProviderRouter(
        [
            (make_spec("deepseek-r1", 1, name="DeepSeek R1"), ScriptedClient("!rate_limit")),
            (make_spec("groq-llama", 4, name="Llama 3.3 70B (Groq)"), ScriptedClient("Answer citing [1].")),
        ],
        clock=FakeClock(),
    )
    fbi = FakeArchiveAdapter(
        "fbi", [archive_record("MKUltra memo", url="https://vault.fbi.gov/mkultra")]
    )
    web = FakeWebAggregator(
        [Source(id="web-1", title="MKUltra", url="https://example.com/m", type=SourceType.WEB, snippet="s")]
    )
    return ResearchOrchestrator(
        router=router,
        archival=ArchivalSearchService({"fbi": fbi}),
        web=web,
        snapshots=FakeSnapshotSearch(),
        store=store,
    )


@pytest.fixture()
def app(orchestrator):
    app = create_app()

    from server import dependencies as deps

    # Clear singleton cache to avoid cross-test leakage
    if hasattr(deps.get_orchestrator, "_instance"):
        delattr(deps.get_orchestrator, "_instance")

    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["service"] == "deep-archive"
    assert r.json()["uptimeS"] >= 0
    assert "X-Request-ID" in r.headers


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_chat_requires_api_key(client, api_env):
    r = client.post("/v1/chat", json={"message": "MKUltra"})
    assert r.status_code == 401

    r = client.post("/v1/chat", json={"message": "MKUltra"}, headers={"X-API-Key": "wrong"})
    assert r.status_code == 401


def test_chat_returns_camel_case_contract(client, api_env):
    r = client.post(
        "/v1/chat",
        json={"message": "MKUltra", "sources": ["fbi", "web"], "maxSources": 10, "archiveYears": 25},
        headers=api_env,
    )

    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"message", "sources", "conversationId", "messageId", "modelUsed", "degraded"}
    assert body["modelUsed"] == "Llama 3.3 70B (Groq)"
    assert body["degraded"] is False
    assert [s["type"] for s in body["sources"]] == ["fbi", "web"]
    assert body["message"].startswith("Answer citing [1].")


@pytest.mark.parametrize(
    "payload",
    [
        {"message": ""},
        {"message": "   "},
        {"message": "q", "maxSources": 4},
        {"message": "q", "maxSources": 51},
        {"message": "q", "archiveYears": 0},
        {"message": "q", "sources": []},
        {"message": "q", "sources": ["dropbox"]},
    ],
)
def test_chat_validation_errors_are_422(client, api_env, payload):
    r = client.post("/v1/chat", json=payload, headers=api_env)
    assert r.status_code == 422


def test_unknown_conversation_is_404(client, api_env):
    r = client.post("/v1/chat", json={"message": "q", "conversationId": "missing", "sources": ["web"]}, headers=api_env)
    assert r.status_code == 404


def test_conversation_lifecycle(client, api_env):
    chat = client.post("/v1/chat", json={"message": "MKUltra", "sources": ["web"]}, headers=api_env).json()
    conversation_id = chat["conversationId"]

    listed = client.get("/v1/conversations", headers=api_env).json()
    assert [c["id"] for c in listed] == [conversation_id]
    assert listed[0]["title"] == "MKUltra"

    messages = client.get(f"/v1/conversations/{conversation_id}/messages", headers=api_env).json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[1]["id"] == chat["messageId"]
    assert messages[1]["sources"][0]["url"] == "https://example.com/m"

    history = client.get("/v1/search-history?limit=5", headers=api_env).json()
    assert history[0]["query"] == "MKUltra"
    assert history[0]["resultsCount"] == 1

    assert client.delete(f"/v1/conversations/{conversation_id}", headers=api_env).status_code == 204
    assert client.delete(f"/v1/conversations/{conversation_id}", headers=api_env).status_code == 404
    assert client.get(f"/v1/conversations/{conversation_id}/messages", headers=api_env).status_code == 404


def test_providers_show_cooldown_after_failure(client, api_env):
    client.post("/v1/chat", json={"message": "MKUltra", "sources": ["web"]}, headers=api_env)

    providers = client.get("/v1/providers", headers=api_env).json()

    assert [p["id"] for p in providers] == ["deepseek-r1", "groq-llama"]
    assert providers[0]["available"] is False
    assert providers[0]["unavailableUntil"] == pytest.approx(1_300.0)
    assert providers[1]["available"] is True


def test_bookmark_lifecycle(client, api_env):
    created = client.post(
        "/v1/bookmarks",
        json={"title": "MKUltra memo", "url": "https://www.cia.gov/readingroom/mkultra", "declassifiedDate": "1977"},
        headers=api_env,
    )
    assert created.status_code == 201
    bookmark = created.json()
    assert bookmark["sourceType"] == "cia"
    assert bookmark["declassifiedDate"] == "1977"
    assert "createdAt" in bookmark

    listed = client.get("/v1/bookmarks", headers=api_env).json()
    assert [b["id"] for b in listed] == [bookmark["id"]]

    assert client.delete(f"/v1/bookmarks/{bookmark['id']}", headers=api_env).status_code == 204
    assert client.delete(f"/v1/bookmarks/{bookmark['id']}", headers=api_env).status_code == 404
    assert client.get("/v1/bookmarks", headers=api_env).json() == []


@pytest.mark.parametrize(
    "payload",
    [
        {"url": "https://example.com"},
        {"title": "t", "url": "   "},
        {"title": "t", "url": "https://example.com", "sourceType": "dropbox"},
    ],
)
def test_invalid_bookmarks_are_422(client, api_env, payload):
    assert client.post("/v1/bookmarks", json=payload, headers=api_env).status_code == 422


def test_bookmarks_require_api_key(client, api_env):
    assert client.get("/v1/bookmarks").status_code == 401
