"""Structured logging configuration for fluentspec.

Provides:
- Structured logging with structlog
- Context-aware logging
- Per-case execution records
"""

import logging
import sys
from contextlib import contextmanager
from typing import Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Output logs as JSON
        include_timestamp: Include timestamps in logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if include_timestamp:
        processors.insert(5, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings=None) -> None:
    """Configure logging from fluentspec Settings (loaded from env if omitted)."""
    if settings is None:
        from fluentspec.config import get_settings

        settings = get_settings()

    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        include_timestamp=settings.log_timestamps,
    )


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Get a configured logger with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


class LogContext:
    """Context manager for scoped logging context.

    Usage:
        with LogContext(behavior="subtraction"):
            logger.info("Expanding behavior")
            # All logs within this block have behavior bound
    """

    def __init__(self, **context):
        self.context = context
        self._bound = False

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        self._bound = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._bound:
            structlog.contextvars.unbind_contextvars(*self.context.keys())
            self._bound = False


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[structlog.BoundLogger] = None,
    **context,
):
    """Context manager for logging operation start/end.

    Yields:
        Dict to store operation results

    Example:
        with log_operation("expand_behavior", behavior="addition") as op:
            cases = expander.expand(spec)
            op["cases"] = len(cases)
    """
    log = logger or get_logger()
    log = log.bind(operation=operation, **context)

    log.debug(f"{operation} started")
    result = {"success": False, "error": None}

    try:
        yield result
        result["success"] = True
        log.debug(f"{operation} completed", **result)
    except Exception as e:
        result["error"] = str(e)
        log.error(f"{operation} failed", **result)
        raise


class CaseExecutionLogger:
    """Logger specialized for tracking the execution of one test case."""

    def __init__(self, given: str, when: str, then: str, with_label: str = ""):
        self.log = get_logger().bind(
            given=given,
            when=when,
            then=then,
            with_label=with_label,
        )

    def case_started(self) -> None:
        self.log.debug("Case started")

    def case_completed(self, status: str, duration_ms: int) -> None:
        """Log case completion; failures are raised to warning level."""
        level = self.log.warning if status == "failed" else self.log.debug
        level("Case completed", status=status, duration_ms=duration_ms)

    def teardown_failed(self, error: str) -> None:
        self.log.error("Teardown failed", error=error)

    def expectation_checked(self, expected_type: Optional[str], actual_type: Optional[str], matched: bool) -> None:
        """Log an expected-exception comparison."""
        level = self.log.debug if matched else self.log.warning
        level(
            "Exception expectation checked",
            expected_type=expected_type,
            actual_type=actual_type,
            matched=matched,
        )
