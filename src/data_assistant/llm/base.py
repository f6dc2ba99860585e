"""
Base LLM Interface
==================

Abstract interface for chat-completion providers.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from data_assistant.models import ChatTurn, LLMResponse


class LLMInterface(ABC):
    """Abstract interface for LLM providers."""

    model: str = "unknown"

    @property
    def configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        return True

    @abstractmethod
    def generate(
        self, messages: Sequence[ChatTurn], max_tokens: int | None = None
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: Ordered role-tagged messages, system instruction first
            max_tokens: Optional bound on output tokens

        Returns:
            LLMResponse with generated content
        """
        pass
