"""
OpenRouter LLM
==============

Chat-completion client for any OpenAI-compatible endpoint (OpenRouter by
default) built on the ``openai`` SDK.
"""

from typing import Sequence

import openai
import structlog
from openai import OpenAI

from data_assistant.errors import ConfigurationError, UpstreamServiceError
from data_assistant.llm.base import LLMInterface
from data_assistant.models import ChatTurn, LLMResponse

logger = structlog.get_logger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-3-sonnet"


class OpenRouterLLM(LLMInterface):
    """
    LLM provider backed by an OpenAI-compatible chat-completion API.

    SDK-level retries are disabled: a failed call ends the chat turn.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str = OPENROUTER_BASE_URL,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        timeout: float = 60.0,
        app_url: str | None = None,
        app_title: str | None = None,
        client: OpenAI | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        headers = {}
        if app_url:
            headers["HTTP-Referer"] = app_url
        if app_title:
            headers["X-Title"] = app_title

        if client is not None:
            self.client = client
        elif api_key:
            self.client = OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
                default_headers=headers or None,
            )
        else:
            self.client = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def generate(
        self, messages: Sequence[ChatTurn], max_tokens: int | None = None
    ) -> LLMResponse:
        if self.client is None:
            raise ConfigurationError("Language model API key is not configured")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[turn.to_message() for turn in messages],
                temperature=self.temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except openai.APIStatusError as exc:
            logger.error("llm_call_failed", status_code=exc.status_code, error=exc.message)
            raise UpstreamServiceError(exc.message, status_code=exc.status_code) from exc
        except openai.APIConnectionError as exc:
            logger.error("llm_unreachable", error=str(exc))
            raise UpstreamServiceError(str(exc)) from exc

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            model=response.model or self.model,
            tokens_used=tokens_used,
        )
