"""
Chat Routes
===========

Main API endpoint for natural-language questions about the program data.
"""

import time

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from api.schemas import ChatRequest, ChatResponse, ErrorResponse
from data_assistant.assistant import DataAssistant
from data_assistant.errors import ConfigurationError, UpstreamServiceError
from data_assistant.models import ChatTurn, Role
from observability.logging_config import get_logger
from observability.metrics import track_turn_failure, track_turn_metrics
from security.auth import verify_api_key

logger = get_logger(__name__)

router = APIRouter(tags=["Chat"], dependencies=[Depends(verify_api_key)])

NOT_CONFIGURED_MESSAGE = "AI service not configured. Please contact administrator."
AUTH_FAILED_MESSAGE = "AI service authentication failed. Please contact administrator."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."
GENERIC_FAILURE_MESSAGE = "An error occurred while processing your request. Please try again."


def get_assistant(request: Request) -> DataAssistant:
    """Dependency to get the configured assistant from app state."""
    return request.app.state.assistant


def _error(status_code: int, error: str, message: str, request_id: str | None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error,
            "message": message,
            "request_id": request_id,
        },
    )


def _upstream_error(exc: UpstreamServiceError, request_id: str | None) -> HTTPException:
    """Map an upstream failure onto the HTTP status reported to the caller."""
    if exc.status_code == 429:
        return _error(429, "RateLimited", RATE_LIMITED_MESSAGE, request_id)
    if exc.status_code in (401, 403):
        return _error(500, "UpstreamAuthenticationFailed", AUTH_FAILED_MESSAGE, request_id)
    return _error(500, "UpstreamServiceError", GENERIC_FAILURE_MESSAGE, request_id)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed message"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        429: {"model": ErrorResponse, "description": "Language model rate limit"},
        500: {"model": ErrorResponse, "description": "Language model or database unavailable"},
    },
    summary="Ask a question about the program data",
    description="Answers a natural language question, querying the database when needed",
)
async def chat(
    body: ChatRequest,
    request: Request,
    assistant: DataAssistant = Depends(get_assistant),
) -> ChatResponse:
    """
    Run one chat turn.

    Query generation failures never surface as HTTP errors; they come back
    as an explanatory answer with ``hasData`` false.
    """
    request_id = getattr(request.state, "request_id", None)

    if not body.message or not body.message.strip():
        raise _error(400, "InputError", "Message is required", request_id)

    if not assistant.llm.configured:
        track_turn_failure()
        raise _error(500, "ConfigurationError", NOT_CONFIGURED_MESSAGE, request_id)

    history = [
        ChatTurn(Role(turn.role.value), turn.content)
        for turn in body.conversation_history
    ]

    start_time = time.perf_counter()
    try:
        outcome = await run_in_threadpool(assistant.respond, body.message, history)
    except ConfigurationError:
        track_turn_failure()
        raise _error(500, "ConfigurationError", NOT_CONFIGURED_MESSAGE, request_id)
    except UpstreamServiceError as exc:
        track_turn_failure()
        logger.error(
            "chat_turn_failed",
            service=exc.service,
            status_code=exc.status_code,
            error=exc.message,
        )
        raise _upstream_error(exc, request_id)

    track_turn_metrics(
        has_data=outcome.has_data,
        model_calls=outcome.model_calls,
        query_attempts=outcome.query_attempts,
        repair_attempted=outcome.repair_attempted,
        duration_seconds=time.perf_counter() - start_time,
    )

    return ChatResponse(
        response=outcome.final_text,
        has_data=outcome.has_data,
        timestamp=outcome.timestamp,
    )
