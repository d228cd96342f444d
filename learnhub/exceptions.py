"""Error taxonomy for the LearnHub engine.

Every failed precondition is raised as an ``EngineError`` subclass carrying a
stable ``error_type`` code; callers map codes to user-facing messages.
Only ``StorageUnavailableError`` is worth retrying.
"""

from typing import Any


class EngineError(Exception):
    """Base exception for submission engine errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_type: str = "engine_error",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or {}
        super().__init__(message)


class NotFoundError(EngineError):
    """Raised when a challenge or submission does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(
            f"{entity_type} '{entity_id}' not found",
            "not_found",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ForbiddenError(EngineError):
    """Raised on an ownership or role violation."""

    def __init__(self, message: str):
        super().__init__(message, "forbidden")


class ExpiredError(EngineError):
    """Raised when submitting to a challenge past its due date."""

    def __init__(self, challenge_id: str, due_date: str):
        super().__init__(
            f"Challenge '{challenge_id}' closed at {due_date}",
            "expired",
            {"challenge_id": challenge_id, "due_date": due_date},
        )
        self.challenge_id = challenge_id


class ConflictError(EngineError):
    """Raised when an active submission already exists, or a concurrent write won."""

    def __init__(self, message: str):
        super().__init__(message, "conflict")


class InvalidStateError(EngineError):
    """Raised when a transition is attempted from the wrong state."""

    def __init__(self, current: str, target: str, allowed: list[str] | None = None):
        allowed = allowed or []
        super().__init__(
            f"Cannot transition submission from '{current}' to '{target}'. "
            f"Allowed from '{current}': {allowed}",
            "invalid_state",
            {"current": current, "target": target, "allowed": allowed},
        )
        self.current = current
        self.target = target


class InvalidArgumentError(EngineError):
    """Raised for missing or out-of-range arguments."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "invalid_argument", {"field": field} if field else None)
        self.field = field


class StorageUnavailableError(EngineError):
    """Raised when the persistent store cannot be reached or times out."""

    retryable = True

    def __init__(
        self,
        message: str = "Persistent store unavailable",
        original_error: Exception | None = None,
    ):
        details: dict[str, Any] = {}
        if original_error is not None:
            details["error_type"] = type(original_error).__name__
        super().__init__(message, "storage_unavailable", details)
        self.original_error = original_error


__all__ = [
    "ConflictError",
    "EngineError",
    "ExpiredError",
    "ForbiddenError",
    "InvalidArgumentError",
    "InvalidStateError",
    "NotFoundError",
    "StorageUnavailableError",
]
