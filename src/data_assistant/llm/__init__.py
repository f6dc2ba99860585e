"""
LLM Module
==========

Pluggable chat-completion providers.
"""

from data_assistant.llm.base import LLMInterface
from data_assistant.llm.mock import MockLLM
from data_assistant.llm.openrouter import OpenRouterLLM

__all__ = [
    "LLMInterface",
    "MockLLM",
    "OpenRouterLLM",
]
