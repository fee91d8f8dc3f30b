"""
AI API tests - feature endpoints, degraded replies and the audit trail surface.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.ai.dispatcher import PromptDispatcher
from src.api.main import create_app
from src.core.config import OllamaSettings

ALICE = {"X-User-Id": "U-1", "X-User-Name": "Alice Auditor"}


@pytest.fixture
def ollama_client():
    mock_client = MagicMock()
    mock_client.generate = AsyncMock(return_value={"response": "**Insight** one", "done": True})
    mock_client.list = AsyncMock(return_value={"models": [{"model": "llama3.2:latest"}]})
    return mock_client


@pytest.fixture
def app(ollama_client):
    settings = OllamaSettings("http://ollama.test:11434", "llama3.2", 5.0, 0.7, 0.9)
    return create_app(dispatcher=PromptDispatcher(settings=settings, client=ollama_client))


@pytest.fixture
def client(app):
    return TestClient(app)


class TestFeatureEndpoints:
    """Test AI feature endpoints."""

    def test_analyze_risk_returns_cleaned_text(self, client):
        response = client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "plain_text"
        assert data["text"] == "Insight one"
        assert data["degraded"] is False

    def test_board_report_accepts_structured_data(self, client, ollama_client):
        response = client.post("/ai/generate-board-report", json={"data": {"openRisks": 4}}, headers=ALICE)

        assert response.status_code == 200
        assert '{"openRisks": 4}' in ollama_client.generate.await_args.kwargs["prompt"]

    def test_regulatory_impact_rejects_empty_name(self, client):
        response = client.post("/ai/analyze-regulatory-impact", json={"regulation_name": "  "}, headers=ALICE)

        assert response.status_code == 422

    def test_generic_task_structured(self, client, ollama_client):
        ollama_client.generate.return_value = {"response": '{"score": 55, "gaps": [], "recommendations": []}'}

        response = client.post(
            "/ai/tasks/policy_gap",
            json={"context": {"policy_name": "AUP", "framework": "NIST CSF"}},
            headers=ALICE,
        )

        data = response.json()
        assert data["kind"] == "structured"
        assert data["data"]["score"] == 55

    def test_generic_task_fallback_flagged(self, client, ollama_client):
        ollama_client.generate.return_value = {"response": "maturityScore unknown"}

        response = client.post("/ai/tasks/audit_insights", json={"context": {"audits": []}}, headers=ALICE)

        data = response.json()
        assert data["kind"] == "fallback"
        assert data["degraded"] is True
        assert data["text"] == "maturityScore unknown"
        assert data["data"]["maturityScore"] == 75

    def test_non_finite_score_is_flagged_fallback(self, client, ollama_client):
        ollama_client.generate.return_value = {"response": '{"healthScore": NaN, "summary": "x"}'}

        response = client.post("/ai/tasks/asset_risks", json={"context": {"asset_data": []}}, headers=ALICE)

        data = response.json()
        assert data["kind"] == "fallback"
        assert data["degraded"] is True
        assert data["data"]["healthScore"] == 75

    def test_unknown_task_is_404(self, client):
        response = client.post("/ai/tasks/not_a_task", json={"context": {}}, headers=ALICE)

        assert response.status_code == 404
        assert response.json()["detail"] == "Unknown AI task: not_a_task"

    def test_endpoint_down_returns_degraded_200(self, client, ollama_client):
        ollama_client.generate.side_effect = ConnectionError("refused")

        response = client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "failure"
        assert data["degraded"] is True
        assert data["failure_reason"] == "endpoint_unavailable"
        assert "unavailable" in data["text"]


class TestAuditTrail:
    """Test the audit trail recorded through the API."""

    def test_entries_listed_newest_first(self, client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)
        client.post("/ai/generate-board-report", json={"data": {}}, headers=ALICE)

        response = client.get("/ai/audit-logs")

        data = response.json()
        assert data["total"] == 2
        assert [e["action"] for e in data["entries"]] == ["Board Summary Generation", "Strategic Insights"]
        assert data["entries"][0]["user_name"] == "Alice Auditor"
        assert data["entries"][0]["id"].startswith("LOG-")

    def test_user_name_defaults_to_id(self, client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers={"X-User-Id": "svc-batch"})

        entry = client.get("/ai/audit-logs").json()["entries"][0]

        assert entry["user_id"] == "svc-batch"
        assert entry["user_name"] == "svc-batch"

    def test_no_user_drops_audit_event(self, client):
        response = client.post("/ai/analyze-risk", json={"risk_data": "R-1"})

        assert response.status_code == 200
        assert client.get("/ai/audit-logs").json()["total"] == 0

    def test_user_not_leaked_between_requests(self, client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)
        client.post("/ai/analyze-risk", json={"risk_data": "R-2"})

        assert client.get("/ai/audit-logs").json()["total"] == 1

    def test_search_and_limit(self, client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)
        client.post("/ai/generate-board-report", json={"data": {}}, headers={"X-User-Id": "U-2", "X-User-Name": "Bob"})
        client.post("/ai/generate-board-report", json={"data": {}}, headers=ALICE)

        searched = client.get("/ai/audit-logs", params={"search": "bob"}).json()
        limited = client.get("/ai/audit-logs", params={"limit": 1}).json()

        assert [e["user_name"] for e in searched["entries"]] == ["Bob"]
        assert len(limited["entries"]) == 1
        assert limited["total"] == 3

    def test_limit_out_of_range_rejected(self, client):
        assert client.get("/ai/audit-logs", params={"limit": 0}).status_code == 422

    def test_each_app_has_its_own_log(self, client, ollama_client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)
        settings = OllamaSettings("http://ollama.test:11434", "llama3.2", 5.0, 0.7, 0.9)
        other = TestClient(create_app(dispatcher=PromptDispatcher(settings=settings, client=ollama_client)))

        assert other.get("/ai/audit-logs").json()["total"] == 0


class TestHealth:
    """Test health endpoints."""

    def test_ai_health_healthy(self, client):
        data = client.get("/ai/health").json()

        assert data["status"] == "healthy"
        assert data["model"] == "llama3.2"
        assert data["ollama_url"] == "http://ollama.test:11434"

    def test_ai_health_degraded_when_model_missing(self, client, ollama_client):
        ollama_client.list.return_value = {"models": [{"model": "mistral:7b"}]}

        data = client.get("/ai/health").json()

        assert data["status"] == "degraded"
        assert data["model_available"] is False

    def test_ai_health_unhealthy_when_down(self, client, ollama_client):
        ollama_client.list.side_effect = ConnectionError("refused")

        data = client.get("/ai/health").json()

        assert data["status"] == "unhealthy"
        assert data["reachable"] is False

    def test_process_health_counts_entries(self, client):
        client.post("/ai/analyze-risk", json={"risk_data": "R-1"}, headers=ALICE)

        data = client.get("/health").json()

        assert data["version"] == "1.0.0"
        assert data["audit_entries"] == 1
