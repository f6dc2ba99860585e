"""
FastAPI Application
===================

Main FastAPI application for the data assistant service.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.middleware.telemetry import TelemetryMiddleware
from api.routes.chat import router as chat_router
from api.routes.health import router as health_router
from api.schemas import ErrorResponse
from data_assistant.assistant import DataAssistant
from data_assistant.config import Settings, settings as default_settings
from data_assistant.executor import QueryExecutor, create_query_engine
from data_assistant.llm.openrouter import OpenRouterLLM
from data_assistant.prompts import PromptComposer
from observability.logging_config import get_logger, setup_logging
from observability.metrics import metrics_endpoint, setup_metrics
from observability.tracing import setup_tracing
from security.auth import APIKeyAuth


def create_assistant(settings: Settings) -> DataAssistant:
    """Create and configure the data assistant from settings."""
    llm = OpenRouterLLM(
        api_key=settings.OPENROUTER_API_KEY,
        model=settings.OPENROUTER_MODEL,
        base_url=settings.LLM_BASE_URL,
        temperature=settings.LLM_TEMPERATURE,
        max_tokens=settings.LLM_MAX_TOKENS,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        app_url=settings.APP_URL,
        app_title=settings.APP_TITLE,
    )
    engine = create_query_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
    )
    executor = QueryExecutor(engine, statement_timeout_seconds=settings.QUERY_TIMEOUT_SECONDS)
    composer = PromptComposer(
        history_window=settings.HISTORY_WINDOW,
        max_result_rows=settings.INTERPRETATION_MAX_ROWS,
        organization=settings.ORGANIZATION_NAME,
    )
    return DataAssistant(
        llm=llm,
        executor=executor,
        composer=composer,
        max_tokens=settings.LLM_MAX_TOKENS,
        interpretation_max_tokens=settings.LLM_INTERPRETATION_MAX_TOKENS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    setup_logging(
        level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        json_format=settings.log_json,
    )
    logger = get_logger(__name__)
    logger.info("Starting data assistant API", version=__version__)

    if not app.state.auth.enabled:
        logger.warning("No API keys configured; every protected request will be rejected")
    if not app.state.assistant.llm.configured:
        logger.warning("Language model API key missing; /chat will report a configuration error")

    yield

    logger.info("Shutting down data assistant API")
    app.state.assistant.executor.engine.dispose()


def create_app(
    settings: Settings | None = None,
    assistant: DataAssistant | None = None,
    enable_tracing: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to environment/.env)
        assistant: Pre-built assistant, mainly for tests
        enable_tracing: Whether to install OpenTelemetry instrumentation
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Data Assistant API",
        description=(
            "Answers natural language questions about program participants, "
            "events, surveys, milestones and donations using read-only SQL."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.auth = APIKeyAuth(settings.api_key_list)
    app.state.assistant = assistant or create_assistant(settings)

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(chat_router)

    setup_metrics(app, version=__version__, environment=settings.ENVIRONMENT)
    app.add_route("/metrics", metrics_endpoint)

    if enable_tracing:
        setup_tracing(
            app,
            otlp_endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            version=__version__,
            environment=settings.ENVIRONMENT,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed bodies as 400 Bad Request."""
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=400,
            content={
                "detail": ErrorResponse(
                    error="InputError",
                    message="Message is required and conversationHistory must be a list of {role, content}",
                    request_id=request_id,
                    details={"errors": [str(error.get("msg")) for error in exc.errors()]},
                ).model_dump()
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        request_id = getattr(request.state, "request_id", None)
        get_logger(__name__).exception("Unhandled error", request_id=request_id)
        return JSONResponse(
            status_code=500,
            content={
                "detail": ErrorResponse(
                    error="InternalServerError",
                    message="An unexpected error occurred",
                    request_id=request_id,
                ).model_dump()
            },
        )

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
