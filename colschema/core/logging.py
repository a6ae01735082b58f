"""Structured logging configuration for the collection schema engine.

This module configures structlog for consistent, machine-readable logging
across the validator, differ, compiler and CLI, with context variables for
tracing a single migration plan through every step.
"""

import logging
import sys
import time
from typing import Any

import structlog
from structlog.typing import EventDict


def add_app_context(
    _logger: Any, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application-specific context to log events."""
    event_dict["service"] = "colschema"
    event_dict["component"] = event_dict.get("logger", "unknown")
    return event_dict


def add_plan_id(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Add the migration plan ID bound for the current operation, if any."""
    plan_id = structlog.contextvars.get_contextvars().get("plan_id")
    if plan_id:
        event_dict["plan_id"] = plan_id
    return event_dict


def configure_logging(
    environment: str = "development", log_level: str = "INFO", json_logs: bool = False
) -> None:
    """Configure structured logging for the application.

    Args:
        environment: Application environment (development/testing/production)
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR)
        json_logs: Whether to output JSON format logs
    """
    # Logs go to stderr so generated SQL on stdout stays pipeable
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    if json_logs or environment == "production":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        add_plan_id,
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables for tracing (e.g., plan_id, table)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


class OperationLogger:
    """Times one engine operation and logs its outcome.

    Extra keyword context (such as ``table``) is bound to every event the
    operation logs. ``duration_ms`` is available once the block exits.
    """

    def __init__(
        self, logger: structlog.stdlib.BoundLogger, operation: str, **context: Any
    ):
        self.logger = logger.bind(operation=operation, **context)
        self.operation = operation
        self.start_time: float | None = None
        self.duration_ms: float | None = None

    def __enter__(self) -> "OperationLogger":
        self.start_time = time.perf_counter()
        self.logger.debug("Operation started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.start_time is None:
            return

        self.duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_type is None:
            self.logger.info("Operation completed", duration_ms=self.duration_ms)
        else:
            self.logger.warning(
                "Operation aborted",
                duration_ms=self.duration_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
            )

    def log_progress(self, message: str, **kwargs: Any) -> None:
        """Log a step of the operation."""
        self.logger.debug(message, **kwargs)
