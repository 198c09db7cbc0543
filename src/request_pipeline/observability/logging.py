"""Structured logging configuration for the request pipeline.

This module provides structured logging using structlog so that every
request lifecycle event carries its fingerprint, method, url and outcome
as discrete fields instead of an interpolated message.

Examples:
    Configure logging::

        from request_pipeline.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Use the logger::

        from request_pipeline.observability.logging import get_logger

        logger = get_logger(__name__)
        logger.info(
            "request.settled",
            method="GET",
            url="/users",
            duration_ms=42,
        )

    Output (JSON)::

        {
            "event": "request.settled",
            "method": "GET",
            "url": "/users",
            "duration_ms": 42,
            "timestamp": "2024-01-01T00:00:00.000000Z",
            "level": "info"
        }
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Call once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON logs; if False, use console format
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    processors: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)


def bind_request(method: str, url: str, fingerprint: str) -> Any:
    """Bind request identity to every log event emitted inside the block.

    Examples:
        >>> with bind_request("GET", "/users", "get&/users&&"):
        ...     get_logger(__name__).info("request.dispatched")
    """
    return structlog.contextvars.bound_contextvars(
        method=method,
        url=url,
        fingerprint=fingerprint,
    )
