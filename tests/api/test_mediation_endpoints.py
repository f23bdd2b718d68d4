"""Tests for REST API endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

import api.app as api_app
from api.app import app
from api.dependencies import get_mediator
from tests.fixtures.mock_llm_responses import (
    CONTEXT_SCRIPT,
    MOCK_ENRICH,
    MOCK_EVALUATION,
    MOCK_GENERATE_PATH,
    MOCK_INSIGHTS,
    MOCK_RESOLUTION,
    MOCK_SEMANTIC_VALIDATION_OK,
)
from tests.fixtures.scripted_service import UnavailableContentService


SCRIPT = {
    "generate_path": MOCK_GENERATE_PATH,
    "semantic_validation": MOCK_SEMANTIC_VALIDATION_OK,
    "enrich": MOCK_ENRICH,
    "resolve_conflicts": MOCK_RESOLUTION,
    "extract_insights": MOCK_INSIGHTS,
    "evaluate_transformation": MOCK_EVALUATION,
    **CONTEXT_SCRIPT,
}


@pytest.fixture
def mediator(make_mediator):
    mediator, _ = make_mediator(SCRIPT)
    return mediator


@pytest.fixture
def client(mediator):
    app.dependency_overrides[get_mediator] = lambda: mediator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoints:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Semantic Mediator API"
        assert "version" in data

    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert len(data["operations"]) == 7
        assert data["cache_entries"] == 0

    def test_version(self, client):
        resp = client.get("/api/v1/version")
        assert resp.status_code == 200
        assert "version" in resp.json()


class TestTranslateEndpoint:
    def test_translate(self, client, mediator):
        resp = client.post("/api/v1/translate", json={
            "source_module": "model",
            "target_module": "synthesize",
            "data": {"title": "Auth flows", "summary": "Login"},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["result"]["abstract"] == "Login"
        assert len(mediator.cache) == 1

    def test_missing_fields(self, client):
        resp = client.post("/api/v1/translate", json={"source_module": "model"})
        assert resp.status_code == 422

    def test_step_failure_is_502(self, make_mediator):
        mediator, _ = make_mediator({
            "generate_path": {"steps": [{"type": "format_value", "parameters": {"field": "title", "format": "bogus"}}]},
        })
        app.dependency_overrides[get_mediator] = lambda: mediator
        try:
            resp = TestClient(app).post("/api/v1/translate", json={
                "source_module": "model", "target_module": "synthesize", "data": {"a": "b"},
            })
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 502
        data = resp.json()
        assert data["success"] is False
        assert data["operation"] == "translate"
        assert "Failed to translate data from model to synthesize" in data["error"]

    def test_overflowing_conversion_is_502(self, make_mediator):
        mediator, _ = make_mediator({
            "generate_path": {"steps": [{"type": "convert_type", "parameters": {"field": "n", "to": "integer"}}]},
        })
        app.dependency_overrides[get_mediator] = lambda: mediator
        try:
            resp = TestClient(app).post("/api/v1/translate", json={
                "source_module": "model", "target_module": "synthesize", "data": {"n": "1e400"},
            })
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 502
        assert "Cannot convert" in resp.json()["error"]

    def test_register_target(self, client, mediator):
        resp = client.post("/api/v1/targets", json={
            "module": "validate", "attributes": {"code": "string"},
        })
        assert resp.status_code == 200
        assert resp.json()["result"]["attributes"] == {"code": "string"}
        assert mediator.registry.get("validate") is not None


class TestMediationEndpoints:
    def test_enrich(self, client):
        resp = client.post("/api/v1/enrich", json={
            "module": "generator", "data": {"title": "Auth"}, "context_query": "login",
        })
        assert resp.status_code == 200
        assert resp.json()["result"] == MOCK_ENRICH["enrichedData"]

    def test_resolve_conflicts(self, client):
        resp = client.post("/api/v1/resolve-conflicts", json={
            "module_a": "model", "data_a": {"title": "a"},
            "module_b": "synthesize", "data_b": {"title": "b"},
        })
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["resolved_data"] == MOCK_RESOLUTION["resolvedData"]
        assert result["conflicts"][0]["field"] == "title"
        assert result["strategy_used"] == "llm_resolution"
        assert result["confidence"] == 0.9

    def test_resolve_conflicts_force_strategy(self, client):
        resp = client.post("/api/v1/resolve-conflicts", json={
            "module_a": "model", "data_a": {"title": "Auth"},
            "module_b": "synthesize", "data_b": {"title": "Auth flows"},
            "force_strategy": "llm_resolution",
        })
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["strategy_used"] == "llm_resolution"
        assert result["cached"] is False

    def test_insights(self, client):
        resp = client.post("/api/v1/insights", json={"data": {"x": 1}, "query": "What fails?"})
        assert resp.status_code == 200
        assert resp.json()["result"]["key_insights"] == MOCK_INSIGHTS["keyInsights"]

    def test_track(self, client, store):
        resp = client.post("/api/v1/track", json={
            "source_module": "model", "target_module": "synthesize",
            "source_data": {"a": 1}, "transformed_data": {"b": 1},
            "track_differences": False,
        })
        assert resp.status_code == 200
        record_id = resp.json()["result"]["transformation_id"]
        assert store.get_by_id(record_id)["kind"] == "transformation"

    def test_evaluate(self, client):
        resp = client.post("/api/v1/evaluate", json={"source_data": {"a": 1}, "transformed_data": {"b": 1}})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["result"]["overall_quality"] == 89

    def test_evaluate_unavailable(self, make_mediator):
        mediator, _ = make_mediator(content_service=UnavailableContentService())
        app.dependency_overrides[get_mediator] = lambda: mediator
        try:
            resp = TestClient(app).post("/api/v1/evaluate", json={"source_data": {}, "transformed_data": {}})
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert resp.json()["error"]


class TestValidationContextEndpoint:
    def test_context(self, client):
        resp = client.post("/api/v1/validation-context", json={
            "target_id": "req-1",
            "subject_id": "code-1",
            "previous_validation_ids": ["val-1", "val-2", "val-3"],
            "options": {"strategy": "balanced"},
        })
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["focus_areas"] == ["error_handling", "input_validation", "performance", "security"]
        assert result["semantic_context"]["history_summary"]["score_trend"] == "improving"

    def test_not_found(self, client):
        resp = client.post("/api/v1/validation-context", json={"target_id": "nope", "subject_id": "code-1"})
        assert resp.status_code == 404
        data = resp.json()
        assert data["success"] is False
        assert data["operation"] == "validation-context"
        assert "nope" in data["error"]

    def test_incomplete_custom_weights(self, client):
        resp = client.post("/api/v1/validation-context", json={
            "target_id": "req-1", "subject_id": "code-1",
            "options": {"strategy": "custom", "custom_weights": {"security": 1.0}},
        })
        assert resp.status_code == 422


class TestCacheEndpoints:
    def test_stats_analysis_and_clear(self, client):
        client.post("/api/v1/translate", json={
            "source_module": "model", "target_module": "synthesize", "data": {"summary": "x"},
        })

        stats = client.get("/api/v1/cache/stats").json()["result"]
        assert stats["entries"] == 1

        analysis = client.get("/api/v1/cache/analysis", params={"limit": 5}).json()["result"]
        assert len(analysis["most_used"]) == 1
        assert analysis["analysis"]["degraded"] is True

        cleared = client.delete("/api/v1/cache").json()["result"]
        assert cleared == {"removed": 1}

    def test_analysis_limit_validated(self, client):
        assert client.get("/api/v1/cache/analysis", params={"limit": 0}).status_code == 422


class TestRecordEndpoints:
    def test_append_and_get(self, client):
        resp = client.post("/api/v1/records", json={"record": {"id": "val-9", "kind": "validation", "score": 50}})
        assert resp.status_code == 201
        assert resp.json()["result"] == {"id": "val-9"}

        resp = client.get("/api/v1/records/val-9")
        assert resp.status_code == 200
        assert resp.json()["result"]["score"] == 50

    def test_missing_record(self, client):
        assert client.get("/api/v1/records/absent").status_code == 404


class TestLifespan:
    def test_mediator_built_from_store_file(self, tmp_path, monkeypatch):
        store_file = tmp_path / "records.json"
        store_file.write_text(json.dumps([{"id": "req-1", "title": "User login"}]))
        monkeypatch.setattr(api_app.config, "store_path", str(store_file))

        with TestClient(app) as client:
            resp = client.get("/api/v1/records/req-1")
            mediator = app.state.mediator
            assert resp.status_code == 200
            assert resp.json()["result"]["title"] == "User login"

        assert len(mediator.cache) == 0
        assert mediator._closed
