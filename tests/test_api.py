"""
Tests for the decision cache API.
"""

import json

import pytest
from fastapi.testclient import TestClient

from decision_cache.api.app import create_app


@pytest.fixture
def client(engine):
    """Create a test client serving a tmp_path-backed engine."""
    with TestClient(create_app(lambda: engine)) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Decision Cache API"
    assert "decide" in data["endpoints"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "cache_healthy": True}


def test_exact_store_and_lookup(client):
    response = client.put("/cache/exact", json={"key": "/orchestrate status", "response": {"agents": 4}})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.post("/cache/exact/lookup", json={"key": "/orchestrate status"})
    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["response"] == {"agents": 4}
    assert data["access_count"] == 2


def test_exact_lookup_miss(client):
    response = client.post("/cache/exact/lookup", json={"key": "unknown"})
    assert response.status_code == 200
    assert response.json()["found"] is False


def test_empty_key_is_rejected(client):
    response = client.post("/cache/exact/lookup", json={"key": ""})
    assert response.status_code == 422


def test_semantic_store_and_lookup(client):
    response = client.put(
        "/cache/semantic",
        json={"query": "show orchestrator status", "key": "status", "response": "all green"},
    )
    assert response.status_code == 200

    response = client.post("/cache/semantic/lookup", json={"query": "show orchestrator status"})
    data = response.json()
    assert data["found"] is True
    assert data["key"] == "status"
    assert data["matched_query"] == "show orchestrator status"
    assert data["similarity"] == pytest.approx(1.0)
    assert data["lookup_time_ms"] >= 0


def test_semantic_lookup_miss(client):
    response = client.post("/cache/semantic/lookup", json={"query": "anything", "threshold": 0.5})
    assert response.status_code == 200
    assert response.json()["found"] is False


def test_warmup_stats_and_cleanup(client):
    response = client.post(
        "/cache/warmup",
        json={"entries": [{"key": "/automation status", "response": "ok"}, {"key": "/orchestrate discover", "response": []}]},
    )
    assert response.json()["count"] == 2

    stats = client.get("/stats").json()
    assert stats["exact_entry_count"] == 2
    assert stats["backend"] == "json"
    assert stats["ttl_seconds"] == 3600
    assert stats["embedding_model"] == "hashing-64"

    response = client.post("/cache/cleanup", json={"mode": "all"})
    assert response.status_code == 200
    assert response.json()["total_removed"] == 2
    assert client.get("/stats").json()["exact_entry_count"] == 0


def test_cleanup_rejects_unknown_mode(client):
    response = client.post("/cache/cleanup", json={"mode": "stale"})
    assert response.status_code == 422


def test_routing_decide(client):
    response = client.post(
        "/routing/decide",
        json={"complexity_score": 55, "recommended_pattern": "parallel", "estimated_tokens": 500, "token_budget": 100},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["band"] == "complex"
    assert data["decision"] == "suggest"
    assert data["reason"] == "Insufficient token budget (100 < 500)"


def test_routing_feedback_loop(client, engine):
    engine.settings.config_path.write_text(
        json.dumps({"auto_routing": {"stage2_auto_approve": {"moderate": True}}})
    )
    for _ in range(3):
        response = client.post("/routing/feedback", json={"band": "moderate", "feedback": "user_approve"})
        assert response.status_code == 200

    rate = client.get("/routing/approval-rate/moderate").json()
    assert rate == {"band": "moderate", "approval_rate": 1.0, "threshold": 0.7}

    data = client.post("/routing/decide", json={"complexity_score": 35}).json()
    assert data["decision"] == "auto_approve"


def test_unknown_band_is_rejected(client):
    assert client.get("/routing/approval-rate/trivial").status_code == 422
    response = client.post("/routing/feedback", json={"band": "moderate", "feedback": "maybe"})
    assert response.status_code == 422
