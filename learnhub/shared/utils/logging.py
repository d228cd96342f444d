"""Structured logging configuration using structlog.

Every engine module logs through ``get_logger(__name__)`` with event-style
names (``submission_created``, ``reward_granted``). The acting principal is
bound per operation via contextvars, so it appears on every line.
"""

import logging
import sys
from typing import Any

import structlog

from learnhub.config import get_settings


def _renderer(json_format: bool) -> list[structlog.types.Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service_name: str | None = None,
) -> None:
    """
    Configure structured logging for the engine.

    Arguments left as None fall back to ``LEARNHUB_LOG_LEVEL``,
    ``LEARNHUB_LOG_JSON`` and ``LEARNHUB_SERVICE_NAME``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines when True, console output when False
        service_name: Bound as ``service`` on every entry
    """
    settings = get_settings()
    level_no = getattr(logging, (level or settings.log_level).upper())
    if json_format is None:
        json_format = settings.log_json

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name or settings.service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_principal_context(
    principal_id: str,
    role: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Bind the acting principal to all subsequent log entries.

    Call this at the start of an engine operation so every log line
    emitted while handling it carries the caller's identity.

    Args:
        principal_id: Authenticated user ID
        role: Optional role claim of the principal
        **kwargs: Additional context to bind
    """
    context = {"principal_id": principal_id}
    if role:
        context["principal_role"] = role
    context.update(kwargs)
    structlog.contextvars.bind_contextvars(**context)


def clear_principal_context() -> None:
    """Remove principal context bound by ``bind_principal_context``."""
    structlog.contextvars.unbind_contextvars(
        "principal_id", "principal_role", "operation"
    )
