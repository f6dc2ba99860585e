"""
OpenTelemetry Tracing
=====================

Request spans from the FastAPI instrumentation; the assistant adds a
``chat_turn`` span with per-turn attributes.
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from observability.logging_config import get_logger

logger = get_logger(__name__)

EXPORT_DISABLED = "disabled"


def setup_tracing(
    app: FastAPI,
    otlp_endpoint: str = EXPORT_DISABLED,
    service_name: str = "data-assistant-api",
    version: str = "0.1.0",
    environment: str = "development",
) -> None:
    """
    Set up OpenTelemetry tracing for the application.

    Args:
        app: FastAPI application instance
        otlp_endpoint: OTLP gRPC collector endpoint, or "disabled" for no export
        service_name: Name of the service for traces
        version: Service version attached to the resource
        environment: Deployment environment attached to the resource
    """
    resource = Resource.create({
        SERVICE_NAME: service_name,
        "service.version": version,
        "deployment.environment": environment,
    })

    provider = TracerProvider(resource=resource)

    if otlp_endpoint and otlp_endpoint != EXPORT_DISABLED:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info("tracing_export_enabled", endpoint=otlp_endpoint)

    trace.set_tracer_provider(provider)

    # /live and /metrics are polled constantly
    FastAPIInstrumentor.instrument_app(app, excluded_urls="live,metrics")
