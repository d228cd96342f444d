"""Typed data access for the submission lifecycle.

Exposes exactly the lookups and writes the lifecycle service needs, so the
service never builds queries itself.
"""

from uuid import UUID

from sqlalchemy import select

from learnhub.experience.calculator import apply_xp
from learnhub.infrastructure.database.models import (
    Challenge,
    RewardGrant,
    Submission,
    SubmissionComment,
    User,
)
from learnhub.repositories.base import BaseRepository, parse_uuid
from learnhub.shared.schemas.base import ACTIVE_SUBMISSION_STATUSES, SubmissionStatus
from learnhub.shared.utils.datetime_utils import utcnow
from learnhub.shared.utils.logging import get_logger

logger = get_logger(__name__)


class SubmissionRepository(BaseRepository[Submission]):
    """Repository for challenges, submissions, comments and reward grants."""

    @property
    def model_class(self) -> type[Submission]:
        return Submission

    # ------------------------------------------------------------------
    # Challenges
    # ------------------------------------------------------------------

    async def find_challenge(self, challenge_id: str | UUID) -> Challenge | None:
        parsed_id = parse_uuid(challenge_id)
        if parsed_id is None:
            return None
        result = await self.session.execute(
            select(Challenge).where(Challenge.id == parsed_id)
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def find_submission(
        self, submission_id: UUID, for_update: bool = False
    ) -> Submission | None:
        return await self.get_by_id(submission_id, for_update=for_update)

    async def find_active_submission(
        self,
        challenge_id: UUID,
        user_id: UUID,
        for_update: bool = False,
    ) -> Submission | None:
        """The user's ``submitted`` or ``approved`` attempt at a challenge, if any."""
        query = select(Submission).where(
            Submission.challenge_id == challenge_id,
            Submission.user_id == user_id,
            Submission.status.in_(sorted(ACTIVE_SUBMISSION_STATUSES)),
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalars().first()

    async def list_user_submissions(
        self, challenge_id: UUID, user_id: UUID
    ) -> list[Submission]:
        """All of a user's attempts at a challenge, newest first."""
        return await self.list_with_filters(
            [Submission.challenge_id == challenge_id, Submission.user_id == user_id],
            order_by=[Submission.submitted_at.desc()],
            limit=None,
        )

    async def find_latest_submission(
        self, challenge_id: UUID, user_id: UUID
    ) -> Submission | None:
        attempts = await self.list_with_filters(
            [Submission.challenge_id == challenge_id, Submission.user_id == user_id],
            order_by=[Submission.submitted_at.desc()],
            limit=1,
        )
        return attempts[0] if attempts else None

    async def list_approved_submissions(
        self,
        challenge_id: UUID,
        exclude_user_id: UUID | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Submission]:
        """Approved submissions for a challenge, newest first (all of them by default)."""
        filters = [
            Submission.challenge_id == challenge_id,
            Submission.status == SubmissionStatus.APPROVED.value,
        ]
        if exclude_user_id is not None:
            filters.append(Submission.user_id != exclude_user_id)
        return await self.list_with_filters(
            filters,
            order_by=[Submission.submitted_at.desc()],
            limit=limit,
            offset=offset,
        )

    async def insert_submission(self, submission: Submission) -> Submission:
        """Insert a new attempt.

        Raises IntegrityError (via flush) if another active attempt for the
        same (challenge, user) was committed concurrently.
        """
        submission = await self.create(submission)
        logger.info(
            "submission_inserted",
            submission_id=str(submission.id),
            challenge_id=str(submission.challenge_id),
            user_id=str(submission.user_id),
        )
        return submission

    async def update_submission(self, submission: Submission, **fields) -> Submission:
        """Apply field changes to a loaded submission and flush.

        The row's version counter is checked on flush, so a concurrent
        update surfaces as StaleDataError.
        """
        for name, value in fields.items():
            setattr(submission, name, value)
        await self.session.flush()
        return submission

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def insert_comment(self, comment: SubmissionComment) -> SubmissionComment:
        self.session.add(comment)
        await self.session.flush()
        return comment

    async def list_comments(self, submission_id: UUID) -> list[SubmissionComment]:
        result = await self.session.execute(
            select(SubmissionComment)
            .where(SubmissionComment.submission_id == submission_id)
            .order_by(SubmissionComment.created_at.asc())
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------

    async def find_user(self, user_id: UUID, for_update: bool = False) -> User | None:
        query = select(User).where(User.id == user_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_reward(self, user_id: UUID, challenge_id: UUID) -> RewardGrant | None:
        result = await self.session.execute(
            select(RewardGrant).where(
                RewardGrant.user_id == user_id,
                RewardGrant.challenge_id == challenge_id,
            )
        )
        return result.scalar_one_or_none()

    async def grant_reward(
        self,
        user: User,
        challenge: Challenge,
        submission: Submission,
    ) -> RewardGrant | None:
        """Grant the challenge reward to ``user`` unless already granted.

        ``user`` must have been loaded with a row lock. XP and level are
        written together; level is always recomputed from the new XP.

        Returns:
            The new grant, or None if this (user, challenge) was already rewarded
        """
        if await self.find_reward(user.id, challenge.id) is not None:
            logger.info(
                "reward_already_granted",
                user_id=str(user.id),
                challenge_id=str(challenge.id),
            )
            return None

        grant = RewardGrant(
            user_id=user.id,
            challenge_id=challenge.id,
            submission_id=submission.id,
            amount=challenge.xp_reward,
        )
        self.session.add(grant)

        old_level = user.level
        user.xp, user.level = apply_xp(user.xp, challenge.xp_reward)
        user.updated_at = utcnow()
        await self.session.flush()

        logger.info(
            "reward_granted",
            user_id=str(user.id),
            challenge_id=str(challenge.id),
            amount=challenge.xp_reward,
            new_xp=user.xp,
            new_level=user.level,
            level_up=user.level > old_level,
        )
        return grant
