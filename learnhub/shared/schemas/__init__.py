"""Shared Pydantic schemas."""

from learnhub.shared.schemas.base import (
    BaseSchema,
    CourseStatus,
    ErrorPayload,
    OperationResult,
    Principal,
    ReviewDecision,
    Role,
    SubmissionStatus,
)

__all__ = [
    "BaseSchema",
    "CourseStatus",
    "ErrorPayload",
    "OperationResult",
    "Principal",
    "ReviewDecision",
    "Role",
    "SubmissionStatus",
]
