"""
API Schemas
===========

Pydantic models for API request/response validation.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Roles a caller may use in conversation history."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One earlier message of the conversation."""

    role: ChatRole = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Request body for a chat turn."""

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(
        default=None,
        max_length=4000,
        description="Natural language question about the program data",
        examples=["How many participants do we have?"],
    )
    conversation_history: list[ChatMessage] = Field(
        default_factory=list,
        alias="conversationHistory",
        description="Earlier messages, oldest first; only the most recent ones are used",
    )


class ChatResponse(BaseModel):
    """Response body for a chat turn."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(..., description="Narrative answer")
    has_data: bool = Field(
        ...,
        alias="hasData",
        description="Whether the answer is based on retrieved rows",
    )
    timestamp: datetime = Field(..., description="ISO 8601 completion time")


class HealthResponse(BaseModel):
    """Assistant health check response."""

    status: str = Field("ok", description="Service status")
    configured: bool = Field(..., description="Whether the language model credential is present")
    model: str = Field(..., description="Configured language model identifier")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    request_id: str | None = Field(None, description="Request ID if available")
    details: dict[str, Any] | None = Field(None, description="Additional error details")
