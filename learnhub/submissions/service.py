"""SubmissionService — submit, edit, review, reward issuance, comments."""

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.exceptions import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from learnhub.infrastructure.database.models import (
    Challenge,
    RewardGrant,
    Submission,
    SubmissionComment,
)
from learnhub.shared.schemas.base import Principal, ReviewDecision, SubmissionStatus
from learnhub.shared.utils.datetime_utils import is_past_due, utcnow
from learnhub.shared.utils.logging import get_logger

from .repository import SubmissionRepository
from .state_machine import validate_transition

logger = get_logger(__name__)

MIN_GRADE = 0
MAX_GRADE = 100


@dataclass
class VisibleSubmissions:
    """What a learner may see of a challenge's submissions."""

    mine: Submission | None = None
    approved_others: list[Submission] = field(default_factory=list)


@dataclass
class ReviewOutcome:
    """Result of a review, including any reward it issued."""

    submission: Submission
    reward: RewardGrant | None = None


def _require_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise InvalidArgumentError("Submission content must not be empty", field="content")
    return content


def _normalize_attachments(attachments: list[str] | None) -> list[str]:
    return [str(a) for a in attachments] if attachments else []


def _validate_grade(grade: int | None, decision: ReviewDecision) -> int | None:
    if grade is None:
        if decision == ReviewDecision.APPROVED:
            raise InvalidArgumentError("A grade is required to approve a submission", field="grade")
        return None
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidArgumentError("Grade must be an integer", field="grade")
    if not MIN_GRADE <= grade <= MAX_GRADE:
        raise InvalidArgumentError(
            f"Grade must be between {MIN_GRADE} and {MAX_GRADE}, got {grade}",
            field="grade",
        )
    return grade


def _parse_decision(decision: ReviewDecision | str) -> ReviewDecision:
    try:
        return ReviewDecision(decision)
    except ValueError:
        raise InvalidArgumentError(
            f"Decision must be one of {[d.value for d in ReviewDecision]}, got {decision!r}",
            field="decision",
        ) from None


class SubmissionService:
    """Owns the submission lifecycle for one unit of work.

    Every method runs inside the caller's transaction and only flushes;
    committing is the caller's job (see ``SubmissionEngine``).
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = SubmissionRepository(session)

    async def _get_challenge(self, challenge_id: UUID) -> Challenge:
        challenge = await self.repo.find_challenge(challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge", str(challenge_id))
        return challenge

    async def _get_submission(self, submission_id: UUID, for_update: bool = False) -> Submission:
        submission = await self.repo.find_submission(submission_id, for_update=for_update)
        if submission is None:
            raise NotFoundError("Submission", str(submission_id))
        return submission

    async def submit(
        self,
        principal: Principal,
        challenge_id: UUID,
        content: str,
        attachments: list[str] | None = None,
    ) -> Submission:
        """Create a new attempt in ``submitted`` state.

        No XP is granted here; rewards are issued on approval.
        """
        content = _require_content(content)
        challenge = await self._get_challenge(challenge_id)

        now = utcnow()
        if is_past_due(challenge.due_date, now):
            raise ExpiredError(str(challenge.id), challenge.due_date.isoformat())

        existing = await self.repo.find_active_submission(
            challenge.id, principal.id, for_update=True
        )
        if existing is not None:
            raise ConflictError(
                f"User {principal.id} already has a {existing.status} submission "
                f"for challenge {challenge.id}"
            )

        submission = await self.repo.insert_submission(
            Submission(
                challenge_id=challenge.id,
                user_id=principal.id,
                content=content,
                files=_normalize_attachments(attachments),
                status=SubmissionStatus.SUBMITTED.value,
                submitted_at=now,
            )
        )

        logger.info(
            "submission_created",
            submission_id=str(submission.id),
            challenge_id=str(challenge.id),
        )
        return submission

    async def edit_submission(
        self,
        principal: Principal,
        submission_id: UUID,
        content: str,
        attachments: list[str] | None = None,
    ) -> Submission:
        """Overwrite a pending attempt's content and refresh its timestamp."""
        content = _require_content(content)
        submission = await self._get_submission(submission_id, for_update=True)

        if submission.user_id != principal.id:
            raise ForbiddenError("Only the submitting user may edit a submission")
        validate_transition(submission.status, SubmissionStatus.SUBMITTED.value)

        submission = await self.repo.update_submission(
            submission,
            content=content,
            files=_normalize_attachments(attachments),
            submitted_at=utcnow(),
        )

        logger.info("submission_edited", submission_id=str(submission.id))
        return submission

    async def review(
        self,
        principal: Principal,
        submission_id: UUID,
        decision: ReviewDecision | str,
        feedback: str | None,
        grade: int | None = None,
    ) -> ReviewOutcome:
        """Approve or reject a pending attempt.

        The first approval of a (user, challenge) pair credits the challenge's
        XP reward; later approvals and all rejections leave XP untouched.
        """
        if not principal.is_reviewer:
            raise ForbiddenError("Only mentors and admins may review submissions")

        decision = _parse_decision(decision)
        submission = await self._get_submission(submission_id, for_update=True)
        validate_transition(submission.status, decision.value)
        grade = _validate_grade(grade, decision)

        submission = await self.repo.update_submission(
            submission,
            status=decision.value,
            feedback=feedback,
            grade=grade,
            reviewed_by=principal.id,
            reviewed_at=utcnow(),
        )

        reward = None
        if decision == ReviewDecision.APPROVED:
            challenge = await self._get_challenge(submission.challenge_id)
            learner = await self.repo.find_user(submission.user_id, for_update=True)
            if learner is None:
                raise NotFoundError("User", str(submission.user_id))
            reward = await self.repo.grant_reward(learner, challenge, submission)

        logger.info(
            "submission_reviewed",
            submission_id=str(submission.id),
            decision=decision.value,
            grade=grade,
            reward_granted=reward is not None,
        )
        return ReviewOutcome(submission=submission, reward=reward)

    async def list_visible_submissions(
        self,
        principal: Principal,
        challenge_id: UUID,
    ) -> VisibleSubmissions:
        """The requester's latest attempt plus everyone else's approved work.

        Non-approved submissions of other users are never returned, whatever
        the requester's role.
        """
        challenge = await self._get_challenge(challenge_id)
        mine = await self.repo.find_latest_submission(challenge.id, principal.id)
        others = await self.repo.list_approved_submissions(
            challenge.id, exclude_user_id=principal.id
        )
        return VisibleSubmissions(mine=mine, approved_others=others)

    async def submission_history(
        self,
        principal: Principal,
        challenge_id: UUID,
    ) -> list[Submission]:
        """Every attempt the requester has made at a challenge, newest first."""
        challenge = await self._get_challenge(challenge_id)
        return await self.repo.list_user_submissions(challenge.id, principal.id)

    def _can_discuss(self, principal: Principal, submission: Submission) -> bool:
        return submission.user_id == principal.id or principal.is_reviewer

    async def add_comment(
        self,
        principal: Principal,
        submission_id: UUID,
        body: str,
    ) -> SubmissionComment:
        """Append a comment to a submission's discussion thread."""
        if body is None or not body.strip():
            raise InvalidArgumentError("Comment body must not be empty", field="body")

        submission = await self._get_submission(submission_id)
        if not self._can_discuss(principal, submission):
            raise ForbiddenError("Only the submitter or a reviewer may comment on a submission")

        comment = await self.repo.insert_comment(
            SubmissionComment(
                submission_id=submission.id,
                author_id=principal.id,
                body=body.strip(),
            )
        )
        logger.info(
            "comment_added",
            submission_id=str(submission.id),
            comment_id=str(comment.id),
        )
        return comment

    async def list_comments(
        self,
        principal: Principal,
        submission_id: UUID,
    ) -> list[SubmissionComment]:
        """A submission's comments in posting order.

        Approved submissions are public, so anyone may read their thread.
        """
        submission = await self._get_submission(submission_id)
        if (
            submission.status != SubmissionStatus.APPROVED.value
            and not self._can_discuss(principal, submission)
        ):
            raise ForbiddenError("Comments on this submission are not visible to you")
        return await self.repo.list_comments(submission.id)
