"""
Structured logging setup for monkeyrouter.

Provides consistent logging across all modules with support for
JSON formatting (production) and pretty printing (development).
Log lines go to stderr so CLI output on stdout stays machine-readable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    """Create a PrintLogger bound to whatever sys.stderr is right now."""
    return structlog.PrintLogger(sys.stderr)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the entire application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON logs (for production)
        log_file: Optional file path; structlog events go there instead of stderr

    Example:
        # Development (pretty console output)
        setup_logging(level="DEBUG", json_format=False)

        # Production (JSON for log aggregation)
        setup_logging(level="INFO", json_format=True)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    logger_factory: Any = _stderr_logger_factory
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        logging.getLogger().addHandler(file_handler)
        logger_factory = structlog.PrintLoggerFactory(file=file_handler.stream)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=not log_file and sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger

    Example:
        logger = get_logger(__name__)
        logger.info("Query routed", tier="high", max_tokens=1024)
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for adding contextual information to logs.

    Example:
        with LogContext(request_id="123"):
            router.route(query, history)  # Decision log includes request_id
    """

    def __init__(self, **context: Any):
        self.context = context
        self._token: object | None = None

    def __enter__(self) -> LogContext:
        self._token = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token:
            structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_error(
    logger: structlog.BoundLogger,
    operation: str,
    error: Exception,
    **extra: Any,
) -> None:
    """
    Log an error with standard format.

    Args:
        logger: Logger instance
        operation: Operation name
        error: Exception that occurred
        **extra: Additional context
    """
    logger.error(
        f"Failed: {operation}",
        operation=operation,
        error_type=type(error).__name__,
        error_message=str(error),
        **extra,
    )


# =============================================================================
# Specialized Loggers
# =============================================================================


class RoutingLogger:
    """Logger specifically for routing decisions."""

    def __init__(self, component: str = "router"):
        self.logger = get_logger(f"monkeyrouter.routing.{component}")
        self.component = component

    def log_decision(
        self,
        tier: str,
        model_id: str,
        max_tokens: int,
        temperature: float,
        **extra: Any,
    ) -> None:
        """Log a completed routing decision."""
        self.logger.info(
            "Query routed",
            component=self.component,
            tier=tier,
            model=model_id,
            max_tokens=max_tokens,
            temperature=round(temperature, 3),
            **extra,
        )

    def log_adjustment(self, reason: str, **extra: Any) -> None:
        """Log a history-based parameter adjustment."""
        self.logger.debug(
            "Routing parameters adjusted",
            component=self.component,
            reason=reason,
            **extra,
        )


# Initialize default logging on import
setup_logging()
