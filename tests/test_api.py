"""Tests for the FastAPI endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.ai.providers import ProviderError
from src.ai.types import AIRequest, AIResponse, IntentCategory
from src.server import app


@pytest.fixture
def mock_orchestrator():
    """Create a mock orchestrator and attach it to app state (mirrors the lifespan)."""
    orchestrator = MagicMock()
    orchestrator.dispatcher.dispatch.return_value = AIResponse(
        content="Usa un botón primario.", provider_id="anthropic", metadata={"profile": "design"},
    )
    orchestrator.chatbot.run_turn.return_value = "¡Hola! Soy el asistente de Tulum Homes."

    app.state.orchestrator = orchestrator
    yield orchestrator
    app.state.orchestrator = None


@pytest.fixture
def client(mock_orchestrator):
    """FastAPI test client with the mock orchestrator wired up."""
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "realty-ai-orchestrator"


class TestClassifyEndpoint:
    def test_returns_intent_and_scores(self, client, mock_orchestrator):
        response = client.post(
            "/api/ai/classify",
            json={"prompt": "necesito ayuda con el color del botón y la validación del formulario"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["intent"] == "mixed"
        assert data["design_score"] == data["logic_score"]
        mock_orchestrator.dispatcher.dispatch.assert_not_called()


class TestDispatchEndpoint:
    def test_dispatch_returns_response(self, client, mock_orchestrator):
        response = client.post("/api/ai/dispatch", json={"prompt": "mejorar la interfaz"})
        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Usa un botón primario."
        assert data["provider_id"] == "anthropic"

    def test_dispatch_builds_ai_request(self, client, mock_orchestrator):
        client.post(
            "/api/ai/dispatch",
            json={"prompt": "p", "context": {"k": 1}, "intent": "logic", "collaborate": True},
        )
        request = mock_orchestrator.dispatcher.dispatch.call_args[0][0]
        assert request == AIRequest(
            prompt="p", context={"k": 1}, intent=IntentCategory.LOGIC, collaborate=True,
        )

    def test_rejects_unknown_intent(self, client):
        response = client.post("/api/ai/dispatch", json={"prompt": "p", "intent": "marketing"})
        assert response.status_code == 422

    def test_provider_error_maps_to_502(self, client, mock_orchestrator):
        mock_orchestrator.dispatcher.dispatch.side_effect = ProviderError(
            "anthropic error: invalid x-api-key", provider_id="anthropic",
        )
        response = client.post("/api/ai/dispatch", json={"prompt": "p"})
        assert response.status_code == 502
        assert "x-api-key" not in response.json()["detail"]


class TestChatbotEndpoint:
    def test_returns_reply(self, client, mock_orchestrator):
        response = client.post("/api/chatbot/agency-1/messages", json={"message": "Hola"})
        assert response.status_code == 200
        data = response.json()
        assert data["tenant_id"] == "agency-1"
        assert "Tulum Homes" in data["reply"]

    def test_passes_tenant_and_history(self, client, mock_orchestrator):
        client.post(
            "/api/chatbot/agency-7/messages",
            json={
                "message": "¿Y en La Veleta?",
                "history": [
                    {"role": "user", "content": "Busco depa"},
                    {"role": "assistant", "content": "¿En qué zona?"},
                ],
            },
        )
        args = mock_orchestrator.chatbot.run_turn.call_args[0]
        assert args[0] == "agency-7"
        assert args[1] == "¿Y en La Veleta?"
        assert args[2] == [
            {"role": "user", "content": "Busco depa"},
            {"role": "assistant", "content": "¿En qué zona?"},
        ]

    def test_validates_empty_message(self, client):
        response = client.post("/api/chatbot/agency-1/messages", json={"message": ""})
        assert response.status_code == 422

    def test_rejects_system_role_in_history(self, client):
        response = client.post(
            "/api/chatbot/agency-1/messages",
            json={"message": "Hola", "history": [{"role": "system", "content": "x"}]},
        )
        assert response.status_code == 422

    def test_handles_chatbot_error(self, client, mock_orchestrator):
        mock_orchestrator.chatbot.run_turn.side_effect = RuntimeError("graph exploded")
        response = client.post("/api/chatbot/agency-1/messages", json={"message": "Hola"})
        assert response.status_code == 500
        # Verify we do NOT leak the internal error message to the client
        detail = response.json()["detail"]
        assert "graph exploded" not in detail
        assert "internal error" in detail.lower()

    def test_response_includes_request_id_header(self, client):
        response = client.post("/api/chatbot/agency-1/messages", json={"message": "Hola"})
        assert "X-Request-ID" in response.headers

    def test_client_supplied_request_id_is_echoed(self, client):
        response = client.post(
            "/api/chatbot/agency-1/messages",
            json={"message": "Hola"},
            headers={"X-Request-ID": "my-trace-id-123"},
        )
        assert response.headers["X-Request-ID"] == "my-trace-id-123"


class TestOrchestratorNotReady:
    def test_returns_503_when_orchestrator_not_initialised(self):
        with TestClient(app) as tc:
            app.state.orchestrator = None
            response = tc.post("/api/chatbot/agency-1/messages", json={"message": "Hola"})
            assert response.status_code == 503
            assert "starting up" in response.json()["detail"].lower()

