"""ChallengeCatalogService — challenge list and detail views."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.exceptions import InvalidArgumentError, NotFoundError
from learnhub.infrastructure.database.models import Challenge, Course, Submission
from learnhub.repositories.base import parse_uuid, validate_pagination
from learnhub.shared.schemas.base import Principal
from learnhub.shared.utils.datetime_utils import is_past_due, utcnow
from learnhub.shared.utils.logging import get_logger
from learnhub.submissions.schemas import SubmissionResponse
from learnhub.submissions.service import SubmissionService
from learnhub.submissions.state_machine import permits_new_attempt

from .schemas import ChallengeDetail, ChallengeSummary

logger = get_logger(__name__)


class ChallengeCatalogService:
    """Read-only views over challenges, annotated for the requesting user."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _submission_counts(self, challenge_ids: list[UUID]) -> dict[UUID, int]:
        if not challenge_ids:
            return {}
        result = await self.session.execute(
            select(Submission.challenge_id, func.count())
            .where(Submission.challenge_id.in_(challenge_ids))
            .group_by(Submission.challenge_id)
        )
        return {row[0]: row[1] for row in result.all()}

    async def _latest_statuses(
        self, user_id: UUID, challenge_ids: list[UUID]
    ) -> dict[UUID, str]:
        if not challenge_ids:
            return {}
        result = await self.session.execute(
            select(Submission.challenge_id, Submission.status)
            .where(
                Submission.user_id == user_id,
                Submission.challenge_id.in_(challenge_ids),
            )
            .order_by(Submission.submitted_at.desc())
        )
        statuses: dict[UUID, str] = {}
        for challenge_id, status in result.all():
            statuses.setdefault(challenge_id, status)
        return statuses

    async def list_challenges(
        self,
        principal: Principal,
        course_id: UUID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ChallengeSummary]:
        """List challenges by due date, soonest first."""
        limit, offset = validate_pagination(limit, offset)

        query = select(Challenge, Course.title).outerjoin(
            Course, Challenge.course_id == Course.id
        )
        if course_id is not None:
            parsed_course_id = parse_uuid(course_id)
            if parsed_course_id is None:
                raise InvalidArgumentError(f"Malformed course id {course_id!r}", field="course_id")
            query = query.where(Challenge.course_id == parsed_course_id)
        query = query.order_by(Challenge.due_date.asc()).limit(limit).offset(offset)

        rows = (await self.session.execute(query)).all()
        challenge_ids = [challenge.id for challenge, _ in rows]
        counts = await self._submission_counts(challenge_ids)
        statuses = await self._latest_statuses(principal.id, challenge_ids)

        logger.debug(
            "challenges_listed",
            count=len(rows),
            course_id=str(course_id) if course_id else None,
        )

        now = utcnow()
        return [
            ChallengeSummary(
                id=challenge.id,
                course_id=challenge.course_id,
                course_title=course_title,
                title=challenge.title,
                description=challenge.description,
                xp_reward=challenge.xp_reward,
                due_date=challenge.due_date,
                is_expired=is_past_due(challenge.due_date, now),
                user_submission_status=statuses.get(challenge.id),
                can_submit=(
                    not is_past_due(challenge.due_date, now)
                    and permits_new_attempt(statuses.get(challenge.id))
                ),
                total_submissions=counts.get(challenge.id, 0),
            )
            for challenge, course_title in rows
        ]

    async def get_challenge(
        self,
        principal: Principal,
        challenge_id: UUID,
    ) -> ChallengeDetail:
        """Challenge detail with the submissions the requester may see."""
        parsed_id = parse_uuid(challenge_id)
        row = None
        if parsed_id is not None:
            result = await self.session.execute(
                select(Challenge, Course.title)
                .outerjoin(Course, Challenge.course_id == Course.id)
                .where(Challenge.id == parsed_id)
            )
            row = result.first()
        if row is None:
            raise NotFoundError("Challenge", str(challenge_id))
        challenge, course_title = row

        visible = await SubmissionService(self.session).list_visible_submissions(
            principal, challenge.id
        )
        counts = await self._submission_counts([challenge.id])
        expired = is_past_due(challenge.due_date)
        mine_status = visible.mine.status if visible.mine else None

        return ChallengeDetail(
            id=challenge.id,
            course_id=challenge.course_id,
            course_title=course_title,
            title=challenge.title,
            description=challenge.description,
            requirements=list(challenge.requirements or []),
            rubric=challenge.rubric,
            xp_reward=challenge.xp_reward,
            due_date=challenge.due_date,
            is_expired=expired,
            can_submit=not expired and permits_new_attempt(mine_status),
            user_submission=(
                SubmissionResponse.model_validate(visible.mine) if visible.mine else None
            ),
            other_submissions=[
                SubmissionResponse.model_validate(s) for s in visible.approved_others
            ],
            total_submissions=counts.get(challenge.id, 0),
        )
