"""
Prometheus Metrics
==================

Application metrics for monitoring and alerting.
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    multiprocess,
)

CHAT_PATH = "/chat"

# Create a custom registry for this application
REGISTRY = CollectorRegistry()

APP_INFO = Info(
    "data_assistant",
    "Data assistant application information",
    registry=REGISTRY,
)

# Turn metrics
TURNS_TOTAL = Counter(
    "data_assistant_turns_total",
    "Total number of chat turns processed",
    ["outcome"],  # with_data, without_data, upstream_error
    registry=REGISTRY,
)

TURN_DURATION = Histogram(
    "data_assistant_turn_duration_seconds",
    "Chat turn processing duration in seconds",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 60.0],
    registry=REGISTRY,
)

MODEL_CALLS = Histogram(
    "data_assistant_model_calls",
    "Language model calls per turn",
    buckets=[1, 2, 3],
    registry=REGISTRY,
)

QUERY_ATTEMPTS = Histogram(
    "data_assistant_query_attempts",
    "Query executions per turn",
    buckets=[0, 1, 2],
    registry=REGISTRY,
)

REPAIRS_TOTAL = Counter(
    "data_assistant_repairs_total",
    "Turns that needed a repair round-trip",
    registry=REGISTRY,
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=REGISTRY,
)

ACTIVE_TURNS = Gauge(
    "data_assistant_active_turns",
    "Number of chat turns currently being processed",
    registry=REGISTRY,
)


def setup_metrics(app: FastAPI, version: str = "0.1.0", environment: str = "development") -> None:
    """
    Set up Prometheus metrics for the FastAPI application.

    Args:
        app: FastAPI application instance
        version: Application version reported in the info metric
        environment: Deployment environment name
    """
    APP_INFO.info({
        "version": version,
        "environment": environment,
    })

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Callable) -> Response:
        """Middleware to track HTTP metrics."""
        start_time = time.perf_counter()

        is_chat_endpoint = request.url.path == CHAT_PATH
        if is_chat_endpoint:
            ACTIVE_TURNS.inc()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code,
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=request.url.path,
            ).observe(duration)

            return response
        finally:
            if is_chat_endpoint:
                ACTIVE_TURNS.dec()


def track_turn_metrics(
    has_data: bool,
    model_calls: int,
    query_attempts: int,
    repair_attempted: bool,
    duration_seconds: float,
) -> None:
    """
    Track metrics for a completed chat turn.

    Args:
        has_data: Whether the answer was built from query results
        model_calls: Language model calls made during the turn
        query_attempts: Queries executed during the turn
        repair_attempted: Whether the repair round-trip was used
        duration_seconds: Total processing time
    """
    TURNS_TOTAL.labels(outcome="with_data" if has_data else "without_data").inc()
    TURN_DURATION.observe(duration_seconds)
    MODEL_CALLS.observe(model_calls)
    QUERY_ATTEMPTS.observe(query_attempts)
    if repair_attempted:
        REPAIRS_TOTAL.inc()


def track_turn_failure() -> None:
    """Count a turn that ended with an upstream or configuration error."""
    TURNS_TOTAL.labels(outcome="upstream_error").inc()


async def metrics_endpoint(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Handle multiprocess mode if using gunicorn
    try:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        metrics = generate_latest(registry)
    except ValueError:
        # Not in multiprocess mode
        metrics = generate_latest(REGISTRY)

    return Response(
        content=metrics,
        media_type=CONTENT_TYPE_LATEST,
    )
