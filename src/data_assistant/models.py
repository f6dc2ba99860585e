"""
Data Models
===========

Core data structures for the data assistant chat pipeline.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


# A single cell value as returned by the executor
Scalar = Union[str, int, float, bool, None, date, datetime]
Row = dict[str, Any]


class Role(str, Enum):
    """Author of a chat turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatTurn:
    """One role-tagged message sent to the language model."""

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class VerificationStatus(Enum):
    """Status of a verification check."""

    PASSED = "passed"
    FAILED = "failed"


@dataclass
class VerificationResult:
    """Result of a single verification step."""

    verifier_name: str
    status: VerificationStatus
    message: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of the read-only query validator."""

    valid: bool
    sql: Optional[str] = None
    reason: Optional[str] = None


class ExtractionStatus(Enum):
    """How a query block was (or was not) located in model output."""

    FOUND = "found"
    ABSENT = "absent"
    UNTERMINATED = "unterminated"
    NESTED = "nested"


@dataclass(frozen=True)
class CandidateQuery:
    """Query text pulled out of a delimited block in model output."""

    status: ExtractionStatus
    sql: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is ExtractionStatus.FOUND


@dataclass
class ExecutionResult:
    """Rows returned by a successful query."""

    rows: list[Row]
    row_count: int


@dataclass
class AuditEntry:
    """Single entry in the audit trail."""

    timestamp: str
    step: str
    input_data: dict
    output_data: dict
    verification_results: list[VerificationResult] = field(default_factory=list)


@dataclass
class TurnOutcome:
    """Final result of one chat turn."""

    final_text: str
    has_data: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    model_calls: int = 0
    query_attempts: int = 0
    repair_attempted: bool = False
    audit_trail: list[AuditEntry] = field(default_factory=list)


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    tokens_used: int = 0
