"""Base schemas and common types used across the engine."""

from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ===========================================
# ENUMS
# ===========================================


class Role(str, Enum):
    """Platform roles carried by an authenticated principal."""

    STUDENT = "student"
    MENTOR = "mentor"
    ADMIN = "admin"


REVIEWER_ROLES: frozenset[Role] = frozenset({Role.MENTOR, Role.ADMIN})


class SubmissionStatus(str, Enum):
    """Status of a challenge submission."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


ACTIVE_SUBMISSION_STATUSES: frozenset[str] = frozenset(
    {SubmissionStatus.SUBMITTED.value, SubmissionStatus.APPROVED.value}
)


class ReviewDecision(str, Enum):
    """Outcome a reviewer can assign to a submission."""

    APPROVED = "approved"
    REJECTED = "rejected"


class CourseStatus(str, Enum):
    """Publication status of a course."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# ===========================================
# BASE MODELS
# ===========================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class Principal(BaseModel):
    """Authenticated caller identity supplied by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: Role = Role.STUDENT

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES


# ===========================================
# OPERATION RESULTS
# ===========================================

T = TypeVar("T")


class ErrorPayload(BaseSchema):
    """Typed error returned to the presentation layer."""

    code: str = Field(description="Error taxonomy code, e.g. 'not_found'")
    message: str = Field(description="Human-readable explanation")
    retryable: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class OperationResult(BaseSchema, Generic[T]):
    """Structured ``{success, data?, error?}`` result of an engine call."""

    success: bool
    data: T | None = None
    error: ErrorPayload | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ErrorPayload) -> "OperationResult[T]":
        return cls(success=False, error=error)
