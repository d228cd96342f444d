"""Datetime utilities for timezone-aware operations.

Stores may hand back naive datetimes (SQLite drops tzinfo), so every
comparison against "now" goes through ``ensure_utc`` first.
"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime object is timezone-aware and in UTC.

    If the datetime is naive (no tzinfo), it's assumed to be UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: A datetime object (naive or aware)

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_past_due(due_at: datetime | None, now: datetime | None = None) -> bool:
    """Check whether a due timestamp has been reached.

    A challenge is closed at the instant of its due date, so ``due_at == now``
    counts as past due.

    Args:
        due_at: Due datetime (or None for no deadline)
        now: Reference time, defaults to the current UTC time

    Returns:
        True if the deadline has passed, False otherwise
    """
    if due_at is None:
        return False
    reference = ensure_utc(now) if now is not None else utcnow()
    return ensure_utc(due_at) <= reference


def window_start(days: int, now: datetime | None = None) -> datetime:
    """Return the start of a trailing window of ``days`` days ending at ``now``."""
    reference = ensure_utc(now) if now is not None else utcnow()
    return reference - timedelta(days=days)


__all__ = [
    "ensure_utc",
    "is_past_due",
    "utcnow",
    "window_start",
]
