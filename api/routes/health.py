"""
Health Check Routes
===================

Assistant status and liveness endpoints.
"""

from fastapi import APIRouter, Depends, Request

from api.schemas import HealthResponse
from security.auth import verify_api_key

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    dependencies=[Depends(verify_api_key)],
    summary="Assistant health",
    description="Reports whether the language model credential is configured and which model is used",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check for signed-in clients.

    Returns:
        HealthResponse with configuration status and model identifier
    """
    llm = request.app.state.assistant.llm
    return HealthResponse(
        status="ok",
        configured=llm.configured,
        model=llm.model,
    )


@router.get(
    "/live",
    summary="Liveness check",
    description="Simple liveness probe",
)
async def liveness_check() -> dict:
    """
    Liveness check for Kubernetes.

    Returns:
        Simple OK response
    """
    return {"status": "ok"}
