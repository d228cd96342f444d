"""Pydantic v2 schemas for dashboard statistics."""

from datetime import datetime
from uuid import UUID

from learnhub.shared.schemas.base import BaseSchema


class PlatformStats(BaseSchema):
    """Admin dashboard headline numbers."""

    total_users: int = 0
    total_courses: int = 0
    total_enrollments: int = 0
    total_submissions: int = 0
    completion_rate: int = 0
    active_users: int = 0
    monthly_growth: int = 0


class RecentSubmission(BaseSchema):
    """One line of the recent-submissions feed."""

    id: UUID
    user_name: str
    challenge_title: str
    status: str
    submitted_at: datetime
