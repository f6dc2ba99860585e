"""
Mock LLM
========

Scripted LLM implementation for testing and local demos.
"""

from typing import Sequence

from data_assistant.llm.base import LLMInterface
from data_assistant.models import ChatTurn, LLMResponse


class MockLLM(LLMInterface):
    """
    Returns canned responses in order and records every call.

    Once the script runs out the last response is repeated.
    """

    model = "mock-llm-v1"

    def __init__(self, responses: list[str] | None = None) -> None:
        """
        Initialize with canned responses.

        Args:
            responses: Model outputs returned one per call, in sequence
        """
        self.responses = responses or ["I don't have an answer for that."]
        self.calls: list[list[ChatTurn]] = []
        self.max_tokens: list[int | None] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def generate(
        self, messages: Sequence[ChatTurn], max_tokens: int | None = None
    ) -> LLMResponse:
        self.calls.append(list(messages))
        self.max_tokens.append(max_tokens)
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        return LLMResponse(content=self.responses[index], model=self.model)

    def reset(self) -> None:
        """Forget recorded calls for fresh test runs."""
        self.calls = []
        self.max_tokens = []
