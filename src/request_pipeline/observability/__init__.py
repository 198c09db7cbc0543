"""Observability utilities for the request pipeline.

This package provides monitoring and debugging capabilities:
- Prometheus metrics for request outcomes, registry size and loading state
- Structured logging with contextual information
"""

from request_pipeline.observability.logging import bind_request, configure_logging, get_logger
from request_pipeline.observability.metrics import (
    record_cancellation,
    record_duration,
    record_request,
    set_loading,
    set_pending,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_request",
    "record_request",
    "record_duration",
    "record_cancellation",
    "set_pending",
    "set_loading",
]
