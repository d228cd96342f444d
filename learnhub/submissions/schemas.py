"""Pydantic v2 schemas for the submission engine."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from learnhub.shared.schemas.base import BaseSchema


class SubmissionResponse(BaseSchema):
    """A submission as returned to the presentation layer."""

    id: UUID
    challenge_id: UUID
    user_id: UUID
    content: str
    files: list[str] = Field(default_factory=list)
    status: str
    feedback: str | None = None
    grade: int | None = None
    submitted_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: UUID | None = None


class VisibleSubmissionsResponse(BaseSchema):
    """The requester's own attempt plus other learners' approved work."""

    mine: SubmissionResponse | None = None
    approved_others: list[SubmissionResponse] = Field(default_factory=list)


class CommentResponse(BaseSchema):
    """A single entry in a submission's discussion thread."""

    id: UUID
    submission_id: UUID
    author_id: UUID
    body: str
    created_at: datetime


class RewardGrantResponse(BaseSchema):
    """XP issued for an approved submission."""

    id: UUID
    user_id: UUID
    challenge_id: UUID
    submission_id: UUID
    amount: int
    granted_at: datetime
