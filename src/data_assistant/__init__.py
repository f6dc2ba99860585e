"""
Data Assistant
==============

Natural-language questions answered with read-only SQL over the program
database.
"""

from data_assistant.models import (
    AuditEntry,
    CandidateQuery,
    ChatTurn,
    ExecutionResult,
    ExtractionStatus,
    LLMResponse,
    Role,
    TurnOutcome,
    ValidationOutcome,
    VerificationResult,
    VerificationStatus,
)
from data_assistant.errors import (
    ConfigurationError,
    DataAssistantError,
    DatabaseUnavailableError,
    InputError,
    QueryError,
    QueryExecutionError,
    QueryValidationError,
    RepairExhaustedError,
    UpstreamServiceError,
)
from data_assistant.assistant import DataAssistant, TurnState
from data_assistant.executor import QueryExecutor, create_query_engine
from data_assistant.extraction import extract_query, strip_query_blocks
from data_assistant.prompts import PromptComposer
from data_assistant.validator import validate
from data_assistant.llm import LLMInterface, MockLLM, OpenRouterLLM

__version__ = "0.1.0"

__all__ = [
    # Models
    "AuditEntry",
    "CandidateQuery",
    "ChatTurn",
    "ExecutionResult",
    "ExtractionStatus",
    "LLMResponse",
    "Role",
    "TurnOutcome",
    "ValidationOutcome",
    "VerificationResult",
    "VerificationStatus",
    # Errors
    "ConfigurationError",
    "DataAssistantError",
    "DatabaseUnavailableError",
    "InputError",
    "QueryError",
    "QueryExecutionError",
    "QueryValidationError",
    "RepairExhaustedError",
    "UpstreamServiceError",
    # Pipeline
    "DataAssistant",
    "TurnState",
    "QueryExecutor",
    "create_query_engine",
    "extract_query",
    "strip_query_blocks",
    "PromptComposer",
    "validate",
    # LLM
    "LLMInterface",
    "MockLLM",
    "OpenRouterLLM",
]
