"""
Data Assistant Orchestrator
===========================

Drives one chat turn: ask the model, run the query it embeds, repair a failed
query once, and have the model narrate the rows.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional

import structlog
from opentelemetry import trace

from data_assistant.errors import (
    InputError,
    QueryError,
    QueryValidationError,
    RepairExhaustedError,
)
from data_assistant.executor import QueryExecutor
from data_assistant.extraction import extract_query, strip_query_blocks
from data_assistant.llm.base import LLMInterface
from data_assistant.models import (
    AuditEntry,
    ChatTurn,
    Row,
    TurnOutcome,
    VerificationResult,
    VerificationStatus,
)
from data_assistant.prompts import PromptComposer
from data_assistant.validator import validate

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

REPHRASE_MESSAGE = (
    "I wasn't able to put together a working database query for that question. "
    "Could you try rephrasing it?"
)
BOTH_FAILED_MESSAGE = (
    "I tried querying the database twice, but both attempts failed. "
    "Please try rephrasing your question or narrowing it down "
    "(for example to a single program, event or date range)."
)
EMPTY_ANSWER_MESSAGE = (
    "I'm not sure how to answer that. Could you rephrase your question?"
)


class TurnState(Enum):
    """States of the per-turn protocol."""

    AWAITING_MODEL = "awaiting_model"
    HAVE_CANDIDATE = "have_candidate"
    NO_QUERY = "no_query"
    VALIDATING = "validating"
    REJECTED = "rejected"
    EXECUTING = "executing"
    SUCCESS = "success"
    AWAITING_REPAIR_MODEL = "awaiting_repair_model"
    REPAIR_VALIDATING = "repair_validating"
    REPAIR_EXECUTING = "repair_executing"
    REPAIR_SUCCESS = "repair_success"
    REPAIR_FAILED = "repair_failed"
    INTERPRETING = "interpreting"
    DONE = "done"


@dataclass
class _Turn:
    """Mutable working state for a single turn."""

    message: str
    initial_messages: list[ChatTurn] = field(default_factory=list)
    state: TurnState = TurnState.AWAITING_MODEL
    assistant_text: str = ""
    candidate_sql: Optional[str] = None
    error: Optional[str] = None
    rows: list[Row] = field(default_factory=list)
    repair_attempted: bool = False
    model_calls: int = 0
    query_attempts: int = 0
    final_text: str = ""
    has_data: bool = False
    audit_trail: list[AuditEntry] = field(default_factory=list)
    history: list[TurnState] = field(default_factory=list)


class DataAssistant:
    """
    Conversational orchestrator for natural-language questions.

    Holds no state between turns: conversation history is passed in on every
    call. At most two queries are executed per turn (initial + one repair).
    """

    MAX_QUERY_ATTEMPTS = 2

    def __init__(
        self,
        llm: LLMInterface,
        executor: QueryExecutor,
        composer: PromptComposer | None = None,
        max_tokens: int = 1500,
        interpretation_max_tokens: int = 1000,
    ) -> None:
        """
        Initialize the assistant.

        Args:
            llm: Chat-completion provider
            executor: Query executor bound to the program database
            composer: Prompt composer (defaults to the standard instruction set)
            max_tokens: Output bound for query-writing calls
            interpretation_max_tokens: Output bound for the narration call
        """
        self.llm = llm
        self.executor = executor
        self.composer = composer or PromptComposer()
        self.max_tokens = max_tokens
        self.interpretation_max_tokens = interpretation_max_tokens
        self._handlers: dict[TurnState, Callable[[_Turn], TurnState]] = {
            TurnState.AWAITING_MODEL: self._ask_model,
            TurnState.HAVE_CANDIDATE: self._inspect_candidate,
            TurnState.NO_QUERY: self._answer_without_query,
            TurnState.VALIDATING: self._validate,
            TurnState.REJECTED: self._reject,
            TurnState.EXECUTING: self._execute,
            TurnState.SUCCESS: self._succeed,
            TurnState.AWAITING_REPAIR_MODEL: self._ask_repair_model,
            TurnState.REPAIR_VALIDATING: self._validate,
            TurnState.REPAIR_EXECUTING: self._execute,
            TurnState.REPAIR_SUCCESS: self._succeed,
            TurnState.REPAIR_FAILED: self._give_up,
            TurnState.INTERPRETING: self._interpret,
        }

    def _log_audit(
        self,
        turn: _Turn,
        step: str,
        input_data: dict,
        output_data: dict,
        verification_results: list[VerificationResult] | None = None,
    ) -> None:
        """Add entry to audit trail."""
        turn.audit_trail.append(
            AuditEntry(
                timestamp=datetime.now(timezone.utc).isoformat(),
                step=step,
                input_data=input_data,
                output_data=output_data,
                verification_results=verification_results or [],
            )
        )

    def _call_model(self, turn: _Turn, messages: list[ChatTurn], max_tokens: int) -> str:
        turn.model_calls += 1
        response = self.llm.generate(messages, max_tokens=max_tokens)
        self._log_audit(
            turn,
            step=f"model_call_{turn.model_calls}",
            input_data={"messages": len(messages)},
            output_data={"model": response.model, "tokens_used": response.tokens_used},
        )
        return response.content or ""

    # -- state handlers -------------------------------------------------

    def _ask_model(self, turn: _Turn) -> TurnState:
        turn.assistant_text = self._call_model(turn, turn.initial_messages, self.max_tokens)
        return TurnState.HAVE_CANDIDATE

    def _inspect_candidate(self, turn: _Turn) -> TurnState:
        candidate = extract_query(turn.assistant_text)
        self._log_audit(
            turn,
            step="extraction",
            input_data={},
            output_data={"status": candidate.status.value},
        )
        if not candidate.found:
            return TurnState.NO_QUERY
        turn.candidate_sql = candidate.sql
        return TurnState.VALIDATING

    def _answer_without_query(self, turn: _Turn) -> TurnState:
        turn.final_text = turn.assistant_text
        turn.has_data = False
        return TurnState.DONE

    def _validate(self, turn: _Turn) -> TurnState:
        outcome = validate(turn.candidate_sql)
        self._log_audit(
            turn,
            step=f"validation_{turn.query_attempts + 1}",
            input_data={"sql": turn.candidate_sql},
            output_data={"valid": outcome.valid, "reason": outcome.reason},
            verification_results=[
                VerificationResult(
                    verifier_name="ReadOnlyValidator",
                    status=VerificationStatus.PASSED if outcome.valid else VerificationStatus.FAILED,
                    message=outcome.reason or "Query is read-only",
                )
            ],
        )
        if outcome.valid:
            turn.candidate_sql = outcome.sql
            return TurnState.REPAIR_EXECUTING if turn.repair_attempted else TurnState.EXECUTING

        turn.error = f"Query validation failed: {outcome.reason}"
        if turn.repair_attempted:
            return TurnState.REPAIR_FAILED
        return TurnState.REJECTED

    def _reject(self, turn: _Turn) -> TurnState:
        # An invalid first query takes the same repair path as a failed one
        return self._after_failure(turn)

    def _execute(self, turn: _Turn) -> TurnState:
        if turn.query_attempts >= self.MAX_QUERY_ATTEMPTS:
            turn.error = turn.error or "query attempt limit reached"
            return TurnState.REPAIR_FAILED

        turn.query_attempts += 1
        step = f"execution_{turn.query_attempts}"
        try:
            result = self.executor.execute(turn.candidate_sql)
        except QueryError as exc:
            if isinstance(exc, QueryValidationError):
                turn.error = f"Query validation failed: {exc.message}"
            else:
                turn.error = f"Database query failed: {exc.message}"
            self._log_audit(
                turn,
                step=step,
                input_data={"sql": turn.candidate_sql},
                output_data={"error": turn.error},
            )
            logger.info("query_attempt_failed", attempt=turn.query_attempts, error=turn.error)
            return self._after_failure(turn)

        self._log_audit(
            turn,
            step=step,
            input_data={"sql": turn.candidate_sql},
            output_data={"row_count": result.row_count},
        )
        turn.rows = result.rows
        return TurnState.REPAIR_SUCCESS if turn.repair_attempted else TurnState.SUCCESS

    def _after_failure(self, turn: _Turn) -> TurnState:
        if turn.repair_attempted:
            return TurnState.REPAIR_FAILED
        return TurnState.AWAITING_REPAIR_MODEL

    def _succeed(self, turn: _Turn) -> TurnState:
        return TurnState.INTERPRETING

    def _ask_repair_model(self, turn: _Turn) -> TurnState:
        turn.repair_attempted = True
        messages = self.composer.compose_repair(
            turn.initial_messages, turn.assistant_text, turn.error or "unknown error"
        )
        turn.assistant_text = self._call_model(turn, messages, self.max_tokens)

        candidate = extract_query(turn.assistant_text)
        self._log_audit(
            turn,
            step="repair_extraction",
            input_data={"error": turn.error},
            output_data={"status": candidate.status.value},
        )
        if not candidate.found:
            turn.candidate_sql = None
            return TurnState.REPAIR_FAILED
        turn.candidate_sql = candidate.sql
        return TurnState.REPAIR_VALIDATING

    def _give_up(self, turn: _Turn) -> TurnState:
        raise RepairExhaustedError(turn.error or "repair abandoned", sql=turn.candidate_sql)

    def _explain_failure(self, turn: _Turn, exc: RepairExhaustedError) -> TurnState:
        """Turn an exhausted repair into an answer for the user."""
        if exc.sql is None:
            # The repair call produced no query at all
            turn.final_text = REPHRASE_MESSAGE
        else:
            turn.final_text = BOTH_FAILED_MESSAGE
        turn.has_data = False

        logger.warning("repair_exhausted", error=exc.message, attempts=turn.query_attempts)
        self._log_audit(
            turn,
            step="repair_exhausted",
            input_data={"sql": exc.sql},
            output_data={"error": exc.message},
        )
        return TurnState.DONE

    def _interpret(self, turn: _Turn) -> TurnState:
        messages = self.composer.compose_interpretation(
            turn.initial_messages, turn.assistant_text, turn.rows
        )
        turn.final_text = self._call_model(turn, messages, self.interpretation_max_tokens)
        turn.has_data = True
        return TurnState.DONE

    # -- entry point -----------------------------------------------------

    def respond(self, message: str, history: Iterable[ChatTurn] = ()) -> TurnOutcome:
        """
        Answer one user message.

        Args:
            message: The user's question
            history: Earlier turns of the conversation, oldest first

        Returns:
            TurnOutcome with the narrative answer and whether data was retrieved

        Raises:
            InputError: if ``message`` is empty
            UpstreamServiceError: if the language model or database is unavailable
            ConfigurationError: if the language model has no credentials
        """
        if not isinstance(message, str) or not message.strip():
            raise InputError("Message is required")

        turn = _Turn(message=message)
        turn.initial_messages = self.composer.compose_initial(message, history)

        with tracer.start_as_current_span("chat_turn") as span:
            while turn.state is not TurnState.DONE:
                turn.history.append(turn.state)
                try:
                    turn.state = self._handlers[turn.state](turn)
                except RepairExhaustedError as exc:
                    turn.state = self._explain_failure(turn, exc)

            span.set_attribute("turn.model_calls", turn.model_calls)
            span.set_attribute("turn.query_attempts", turn.query_attempts)
            span.set_attribute("turn.repair_attempted", turn.repair_attempted)
            span.set_attribute("turn.has_data", turn.has_data)

        final_text = strip_query_blocks(turn.final_text) or EMPTY_ANSWER_MESSAGE
        logger.info(
            "chat_turn_completed",
            has_data=turn.has_data,
            model_calls=turn.model_calls,
            query_attempts=turn.query_attempts,
            repair_attempted=turn.repair_attempted,
            states=[state.value for state in turn.history],
        )

        return TurnOutcome(
            final_text=final_text,
            has_data=turn.has_data,
            model_calls=turn.model_calls,
            query_attempts=turn.query_attempts,
            repair_attempted=turn.repair_attempted,
            audit_trail=turn.audit_trail,
        )
