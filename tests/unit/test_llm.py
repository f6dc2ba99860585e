"""
Unit Tests for LLM Providers
============================
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from data_assistant.errors import ConfigurationError, UpstreamServiceError
from data_assistant.llm.mock import MockLLM
from data_assistant.llm.openrouter import OpenRouterLLM
from data_assistant.models import ChatTurn, Role

MESSAGES = [
    ChatTurn(Role.SYSTEM, "You are a data analyst."),
    ChatTurn(Role.USER, "How many participants do we have?"),
]


def _completion(content: str | None, total_tokens: int = 42) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
        model="anthropic/claude-3-sonnet",
    )


def _status_error(cls, status_code: int):
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return cls("upstream said no", response=response, body=None)


class TestMockLLM:
    """Tests for the MockLLM implementation."""

    def test_sequential_responses(self) -> None:
        llm = MockLLM(responses=["first", "second", "third"])

        assert llm.generate(MESSAGES).content == "first"
        assert llm.generate(MESSAGES).content == "second"
        assert llm.generate(MESSAGES).content == "third"
        assert llm.generate(MESSAGES).content == "third"  # Stays at last

    def test_records_calls(self) -> None:
        llm = MockLLM(responses=["ok"])
        llm.generate(MESSAGES, max_tokens=100)

        assert llm.call_count == 1
        assert llm.calls[0] == MESSAGES
        assert llm.max_tokens == [100]

    def test_reset(self) -> None:
        llm = MockLLM(responses=["first", "second"])
        llm.generate(MESSAGES)
        llm.reset()
        assert llm.call_count == 0
        assert llm.generate(MESSAGES).content == "first"


class TestOpenRouterLLM:
    """Tests for the OpenAI-compatible client wrapper."""

    def _llm(self, client: MagicMock) -> OpenRouterLLM:
        return OpenRouterLLM(api_key="sk-test", client=client, max_tokens=1500, temperature=0.7)

    def test_generate(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("There are 156 participants.")
        response = self._llm(client).generate(MESSAGES, max_tokens=1000)

        assert response.content == "There are 156 participants."
        assert response.tokens_used == 42
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "You are a data analyst."},
            {"role": "user", "content": "How many participants do we have?"},
        ]
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.7
        assert kwargs["model"] == "anthropic/claude-3-sonnet"

    def test_default_max_tokens(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("hi")
        self._llm(client).generate(MESSAGES)
        assert client.chat.completions.create.call_args.kwargs["max_tokens"] == 1500

    def test_none_content_becomes_empty(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _completion(None)
        assert self._llm(client).generate(MESSAGES).content == ""

    def test_unconfigured(self) -> None:
        llm = OpenRouterLLM(api_key=None)
        assert llm.configured is False
        with pytest.raises(ConfigurationError):
            llm.generate(MESSAGES)

    def test_configured_with_key(self) -> None:
        llm = OpenRouterLLM(api_key="sk-test", app_url="http://localhost:8080", app_title="Assistant")
        assert llm.configured is True

    @pytest.mark.parametrize(
        "error_cls, status_code",
        [
            (openai.RateLimitError, 429),
            (openai.AuthenticationError, 401),
            (openai.InternalServerError, 500),
        ],
    )
    def test_status_errors_mapped(self, error_cls, status_code: int) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = _status_error(error_cls, status_code)

        with pytest.raises(UpstreamServiceError) as exc_info:
            self._llm(client).generate(MESSAGES)
        assert exc_info.value.status_code == status_code
        assert exc_info.value.service == "llm"

    def test_timeout_mapped(self) -> None:
        client = MagicMock()
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        client.chat.completions.create.side_effect = openai.APITimeoutError(request=request)

        with pytest.raises(UpstreamServiceError) as exc_info:
            self._llm(client).generate(MESSAGES)
        assert exc_info.value.status_code is None
