"""
Observability Module
====================

Full-stack observability: metrics, tracing, and structured logging.
"""

from observability.metrics import (
    setup_metrics,
    track_turn_failure,
    track_turn_metrics,
)
from observability.tracing import setup_tracing
from observability.logging_config import setup_logging, get_logger

__all__ = [
    "setup_metrics",
    "track_turn_metrics",
    "track_turn_failure",
    "setup_tracing",
    "setup_logging",
    "get_logger",
]
