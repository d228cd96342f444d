"""Pydantic v2 schemas for the challenge catalog."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from learnhub.shared.schemas.base import BaseSchema
from learnhub.submissions.schemas import SubmissionResponse


class ChallengeSummary(BaseSchema):
    """One row of the challenge list."""

    id: UUID
    course_id: UUID | None = None
    course_title: str | None = None
    title: str
    description: str | None = None
    xp_reward: int
    due_date: datetime
    is_expired: bool
    user_submission_status: str | None = None
    can_submit: bool = False
    total_submissions: int = 0


class ChallengeDetail(BaseSchema):
    """Everything the challenge page renders."""

    id: UUID
    course_id: UUID | None = None
    course_title: str | None = None
    title: str
    description: str | None = None
    requirements: list[str] = Field(default_factory=list)
    rubric: dict[str, int] | None = None
    xp_reward: int
    due_date: datetime
    is_expired: bool
    user_submission: SubmissionResponse | None = None
    can_submit: bool = False
    other_submissions: list[SubmissionResponse] = Field(default_factory=list)
    total_submissions: int = 0
