"""
Errors
======

Exception taxonomy for the chat pipeline.

Query errors are recovered inside a turn through the repair round-trip.
Input, configuration and upstream errors end the turn and are reported by the
HTTP layer.
"""

from typing import Optional


class DataAssistantError(Exception):
    """Base class for all data assistant errors."""


class InputError(DataAssistantError):
    """The user message or history is missing or malformed."""


class ConfigurationError(DataAssistantError):
    """A required credential or setting is absent."""


class QueryError(DataAssistantError):
    """A generated query could not be used."""

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.sql = sql


class QueryValidationError(QueryError):
    """The query broke the read-only, single-statement rules."""


class QueryExecutionError(QueryError):
    """The database rejected the query."""


class RepairExhaustedError(QueryError):
    """Both the original and the repaired query failed."""


class UpstreamServiceError(DataAssistantError):
    """An external service (language model or database) failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        service: str = "llm",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.service = service


class DatabaseUnavailableError(UpstreamServiceError):
    """The database could not serve the query within its bounds."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None, service="database")
