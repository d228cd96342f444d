"""Storage failure handling for repository operations.

Separates storage-layer failures (connection loss, timeouts) from domain
rule failures, and retries only the former.
"""

from __future__ import annotations

import asyncio
import functools
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm.exc import StaleDataError

from learnhub.exceptions import ConflictError, InvalidArgumentError, StorageUnavailableError
from learnhub.shared.utils.logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    ConnectionError,
    TimeoutError,
    OSError,
)


def _sanitize_error_for_logging(error: BaseException) -> str:
    """Describe an error without leaking connection strings or SQL."""
    error_type = type(error).__name__

    safe_messages = {
        "ConnectionError": "Database connection failed",
        "ConnectionRefusedError": "Database connection refused",
        "TimeoutError": "Operation timed out",
        "OSError": "System I/O error",
        "OperationalError": "Database operational error",
        "InterfaceError": "Database driver interface error",
        "DisconnectionError": "Database connection lost",
        "IntegrityError": "Data integrity constraint violation",
        "StaleDataError": "Row modified by a concurrent transaction",
    }

    return safe_messages.get(error_type, f"Error of type {error_type}")


def classify_integrity_error(error: IntegrityError) -> str:
    """Return ``unique``, ``foreign_key`` or ``other`` for an integrity failure.

    PostgreSQL drivers report a SQLSTATE; SQLite only reports message text.
    """
    sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION:
        return "unique"
    if sqlstate == FOREIGN_KEY_VIOLATION:
        return "foreign_key"

    text = str(error.orig).lower()
    if "unique constraint" in text or "duplicate key" in text:
        return "unique"
    if "foreign key" in text:
        return "foreign_key"
    return "other"


def is_transient_error(error: BaseException) -> bool:
    """Whether ``error`` is a storage failure worth retrying."""
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, TRANSIENT_ERRORS)


@asynccontextmanager
async def translate_storage_errors() -> AsyncIterator[None]:
    """Re-raise driver and ORM failures as engine errors.

    Unique violations and optimistic-lock failures mean a concurrent request
    won the race and become ``ConflictError``. Foreign-key and check
    violations are bad input and become ``InvalidArgumentError``.
    Connection-level failures become ``StorageUnavailableError``.
    """
    try:
        yield
    except IntegrityError as e:
        kind = classify_integrity_error(e)
        if kind == "unique":
            logger.info("storage_conflict", error_msg=_sanitize_error_for_logging(e))
            raise ConflictError("Concurrent write conflicts with existing data") from e
        logger.warning(
            "storage_constraint_violation",
            kind=kind,
            error_msg=_sanitize_error_for_logging(e),
        )
        if kind == "foreign_key":
            raise InvalidArgumentError("Write references a record that does not exist") from e
        raise InvalidArgumentError("Write violates a data constraint") from e
    except StaleDataError as e:
        logger.info("storage_conflict", error_msg=_sanitize_error_for_logging(e))
        raise ConflictError("Row was modified by a concurrent request") from e
    except Exception as e:
        if not is_transient_error(e):
            raise
        logger.error(
            "storage_unavailable",
            error_type=type(e).__name__,
            error_msg=_sanitize_error_for_logging(e),
        )
        raise StorageUnavailableError(original_error=e) from e


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delay
    """

    max_retries: int = 2
    base_delay: float = 0.1
    max_delay: float = 2.0
    exponential_base: float = 2.0
    jitter: bool = True

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number (0-indexed)."""
        delay = min(
            self.base_delay * (self.exponential_base ** attempt),
            self.max_delay,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay


def with_retry(
    config: RetryConfig | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry an async callable while it raises ``StorageUnavailableError``.

    Domain errors propagate on the first attempt. Only wrap callables that
    run a whole transaction, so a retry never replays half of one.

    Example:
        @with_retry(RetryConfig(max_retries=3))
        async def load_stats():
            ...
    """
    _config = config or RetryConfig()

    def decorator(
        func: Callable[P, Awaitable[T]],
    ) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(_config.max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except StorageUnavailableError as e:
                    if attempt >= _config.max_retries:
                        logger.error(
                            "retry_exhausted",
                            function=func.__name__,
                            max_retries=_config.max_retries,
                        )
                        raise
                    delay = _config.calculate_delay(attempt)
                    logger.warning(
                        "retry_attempt",
                        function=func.__name__,
                        attempt=attempt + 1,
                        max_retries=_config.max_retries,
                        delay=round(delay, 3),
                        error_type=e.details.get("error_type"),
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("Unexpected state: no result and no exception")

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "TRANSIENT_ERRORS",
    "classify_integrity_error",
    "is_transient_error",
    "translate_storage_errors",
    "with_retry",
]
