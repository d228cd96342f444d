"""PlatformStatsService — counts behind the admin dashboard."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.config import get_settings
from learnhub.infrastructure.database.models import (
    Challenge,
    Course,
    CourseEnrollment,
    Submission,
    User,
)
from learnhub.repositories.base import validate_pagination
from learnhub.shared.schemas.base import CourseStatus
from learnhub.shared.utils.datetime_utils import utcnow, window_start
from learnhub.shared.utils.logging import get_logger

from .calculator import completion_rate, monthly_growth
from .schemas import PlatformStats, RecentSubmission

logger = get_logger(__name__)

UNKNOWN_USER = "Unknown User"
UNKNOWN_CHALLENGE = "Unknown Challenge"


class PlatformStatsService:
    """Aggregates platform-wide counts and derived dashboard metrics."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count(self, model, *filters) -> int:
        query = select(func.count()).select_from(model)
        for f in filters:
            query = query.where(f)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def collect(self, now: datetime | None = None) -> PlatformStats:
        """Gather dashboard statistics as of ``now`` (default: current time)."""
        now = now or utcnow()
        window_days = get_settings().active_user_window_days
        last_window = window_start(window_days, now)
        previous_window = window_start(2 * window_days, now)

        total_users = await self._count(User)
        total_courses = await self._count(Course, Course.status == CourseStatus.PUBLISHED.value)
        total_enrollments = await self._count(CourseEnrollment)
        completed_enrollments = await self._count(
            CourseEnrollment, CourseEnrollment.completed.is_(True)
        )
        total_submissions = await self._count(Submission)
        active_users = await self._count(User, User.updated_at >= last_window)
        users_last_month = await self._count(User, User.created_at >= last_window)
        users_previous_month = await self._count(
            User,
            User.created_at >= previous_window,
            User.created_at < last_window,
        )

        stats = PlatformStats(
            total_users=total_users,
            total_courses=total_courses,
            total_enrollments=total_enrollments,
            total_submissions=total_submissions,
            completion_rate=completion_rate(total_enrollments, completed_enrollments),
            active_users=active_users,
            monthly_growth=monthly_growth(users_last_month, users_previous_month),
        )
        logger.info(
            "platform_stats_collected",
            total_users=stats.total_users,
            completion_rate=stats.completion_rate,
            monthly_growth=stats.monthly_growth,
        )
        return stats

    async def recent_submissions(self, limit: int | None = None) -> list[RecentSubmission]:
        """Newest submissions across all challenges, for the admin feed."""
        if limit is None:
            limit = get_settings().recent_submissions_limit
        limit, _ = validate_pagination(limit, 0)
        result = await self.session.execute(
            select(
                Submission.id,
                Submission.status,
                Submission.submitted_at,
                User.name,
                Challenge.title,
            )
            .outerjoin(User, Submission.user_id == User.id)
            .outerjoin(Challenge, Submission.challenge_id == Challenge.id)
            .order_by(Submission.submitted_at.desc())
            .limit(limit)
        )
        return [
            RecentSubmission(
                id=row.id,
                user_name=row.name or UNKNOWN_USER,
                challenge_title=row.title or UNKNOWN_CHALLENGE,
                status=row.status,
                submitted_at=row.submitted_at,
            )
            for row in result.all()
        ]
