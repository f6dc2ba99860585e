"""
Unit Tests for the HTTP API
===========================
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.main import create_app
from api.middleware.telemetry import resolve_request_id
from data_assistant.assistant import DataAssistant
from data_assistant.config import Settings
from data_assistant.errors import UpstreamServiceError
from data_assistant.executor import QueryExecutor
from data_assistant.llm.base import LLMInterface
from data_assistant.llm.mock import MockLLM
from data_assistant.llm.openrouter import OpenRouterLLM
from observability.logging_config import REDACTED, redact_sensitive

API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}
COUNT_QUERY = '[SQL_QUERY]SELECT COUNT(*) as total FROM "Participant"[/SQL_QUERY]'


class RaisingLLM(LLMInterface):
    model = "raising"

    def __init__(self, status_code: int | None) -> None:
        self.status_code = status_code

    def generate(self, messages, max_tokens=None):
        raise UpstreamServiceError("upstream failed", status_code=self.status_code)


def _client(assistant: DataAssistant) -> TestClient:
    settings = Settings(API_KEYS=API_KEY, OPENROUTER_API_KEY="sk-test", _env_file=None)
    return TestClient(create_app(settings=settings, assistant=assistant, enable_tracing=False))


@pytest.fixture
def scripted_client(make_assistant):
    """Client whose assistant follows a script of model replies."""

    def factory(responses: list[str]):
        assistant, llm = make_assistant(responses)
        return _client(assistant), llm

    return factory


class TestAuthentication:
    def test_chat_requires_key(self, scripted_client) -> None:
        client, llm = scripted_client(["Hello"])
        response = client.post("/chat", json={"message": "Hi"})
        assert response.status_code == 401
        assert llm.call_count == 0

    def test_invalid_key(self, scripted_client) -> None:
        client, _ = scripted_client(["Hello"])
        response = client.post("/chat", json={"message": "Hi"}, headers={"X-API-Key": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "InvalidAPIKey"

    def test_health_requires_key(self, scripted_client) -> None:
        client, _ = scripted_client(["Hello"])
        assert client.get("/health").status_code == 401

    def test_live_is_public(self, scripted_client) -> None:
        client, _ = scripted_client(["Hello"])
        response = client.get("/live")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestChat:
    def test_answer_with_data(self, scripted_client) -> None:
        client, _ = scripted_client([COUNT_QUERY, "There are 156 participants."])
        response = client.post(
            "/chat", json={"message": "How many participants?"}, headers=HEADERS
        )

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "There are 156 participants."
        assert body["hasData"] is True
        assert "timestamp" in body
        assert response.headers["X-Request-ID"]

    def test_history_is_forwarded(self, scripted_client) -> None:
        client, llm = scripted_client(["You asked about donations."])
        response = client.post(
            "/chat",
            json={
                "message": "What did I ask?",
                "conversationHistory": [
                    {"role": "user", "content": "Total donations?"},
                    {"role": "assistant", "content": "$1,350.50 in total."},
                ],
            },
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["hasData"] is False
        assert [turn.content for turn in llm.calls[0][1:3]] == ["Total donations?", "$1,350.50 in total."]

    @pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}, {"message": None}])
    def test_missing_message(self, scripted_client, payload) -> None:
        client, llm = scripted_client(["unused"])
        response = client.post("/chat", json=payload, headers=HEADERS)
        assert response.status_code == 400
        assert llm.call_count == 0

    def test_malformed_history(self, scripted_client) -> None:
        client, _ = scripted_client(["unused"])
        response = client.post(
            "/chat",
            json={"message": "Hi", "conversationHistory": "not a list"},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InputError"

    def test_request_id_echoed(self, scripted_client) -> None:
        client, _ = scripted_client(["Hello"])
        response = client.post(
            "/chat", json={"message": "Hi"}, headers={**HEADERS, "X-Request-ID": "req-123"}
        )
        assert response.headers["X-Request-ID"] == "req-123"


class TestChatErrors:
    def test_unconfigured_model(self, executor) -> None:
        assistant = DataAssistant(llm=OpenRouterLLM(api_key=None), executor=executor)
        response = _client(assistant).post("/chat", json={"message": "Hi"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "ConfigurationError"

    @pytest.mark.parametrize(
        "upstream_status, expected_status, error",
        [
            (429, 429, "RateLimited"),
            (401, 500, "UpstreamAuthenticationFailed"),
            (502, 500, "UpstreamServiceError"),
            (None, 500, "UpstreamServiceError"),
        ],
    )
    def test_upstream_failures(self, executor, upstream_status, expected_status, error) -> None:
        assistant = DataAssistant(llm=RaisingLLM(upstream_status), executor=executor)
        response = _client(assistant).post("/chat", json={"message": "Hi"}, headers=HEADERS)

        assert response.status_code == expected_status
        assert response.json()["detail"]["error"] == error

    def test_unreachable_database(self) -> None:
        engine = MagicMock()
        engine.connect.side_effect = OperationalError(
            None, None, Exception("connection to server failed: Connection refused")
        )
        llm = MockLLM(responses=[COUNT_QUERY])
        assistant = DataAssistant(llm=llm, executor=QueryExecutor(engine))
        response = _client(assistant).post("/chat", json={"message": "How many?"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "UpstreamServiceError"
        assert llm.call_count == 1


class TestHealth:
    def test_configured(self, scripted_client) -> None:
        client, _ = scripted_client(["Hello"])
        response = client.get("/health", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "configured": True, "model": "mock-llm-v1"}

    def test_unconfigured(self, executor) -> None:
        assistant = DataAssistant(
            llm=OpenRouterLLM(api_key=None, model="anthropic/claude-3-sonnet"), executor=executor
        )
        response = _client(assistant).get("/health", headers=HEADERS)
        assert response.json() == {
            "status": "ok",
            "configured": False,
            "model": "anthropic/claude-3-sonnet",
        }


def test_metrics_endpoint(scripted_client) -> None:
    client, _ = scripted_client(["Hello"])
    client.post("/chat", json={"message": "Hi"}, headers=HEADERS)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "data_assistant_turns_total" in response.text


class TestTelemetryHelpers:
    def test_malformed_request_id_replaced(self) -> None:
        assert resolve_request_id("req-123") == "req-123"
        assert resolve_request_id("bad id\nwith newline") != "bad id\nwith newline"
        assert resolve_request_id(None)

    def test_sensitive_keys_redacted(self) -> None:
        event = redact_sensitive(None, "info", {"event": "x", "api_key": "sk-1", "rows": [{"a": 1}]})
        assert event == {"event": "x", "api_key": REDACTED, "rows": REDACTED}
