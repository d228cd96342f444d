"""SubmissionEngine — the in-process façade the presentation layer calls.

Each operation runs in its own transaction and returns an
``OperationResult`` instead of raising, so callers branch on
``result.success`` and ``result.error.code``.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learnhub.challenges.service import ChallengeCatalogService
from learnhub.config import get_settings
from learnhub.exceptions import EngineError, ForbiddenError
from learnhub.infrastructure.database.session import get_session_factory, transaction
from learnhub.repositories.resilience import RetryConfig, translate_storage_errors, with_retry
from learnhub.shared.schemas.base import (
    ErrorPayload,
    OperationResult,
    Principal,
    ReviewDecision,
    Role,
)
from learnhub.shared.utils.logging import (
    bind_principal_context,
    clear_principal_context,
    get_logger,
)
from learnhub.stats.service import PlatformStatsService

from .schemas import (
    CommentResponse,
    RewardGrantResponse,
    SubmissionResponse,
    VisibleSubmissionsResponse,
)
from .service import SubmissionService

logger = get_logger(__name__)

R = TypeVar("R")


def error_payload(error: EngineError) -> ErrorPayload:
    """Convert an engine exception to the wire-safe error shape."""
    return ErrorPayload(
        code=error.error_type,
        message=error.message,
        retryable=error.retryable,
        details=error.details,
    )


def _require_admin(principal: Principal) -> None:
    if principal.role != Role.ADMIN:
        raise ForbiddenError("Platform statistics are restricted to admins")


def _present_submission(submission) -> SubmissionResponse:
    return SubmissionResponse.model_validate(submission)


class SubmissionEngine:
    """Runs lifecycle operations atomically and reports structured results."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self._session_factory = session_factory
        self._retry_config = retry_config or RetryConfig(
            max_retries=get_settings().storage_max_retries
        )

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def _run(
        self,
        operation: str,
        principal: Principal,
        work: Callable[[AsyncSession], Awaitable[R]],
        present: Callable[[R], Any],
    ) -> OperationResult:
        @with_retry(self._retry_config)
        async def attempt() -> Any:
            async with translate_storage_errors():
                async with transaction(self.session_factory) as session:
                    outcome = await work(session)
                    return present(outcome)

        bind_principal_context(str(principal.id), principal.role.value, operation=operation)
        try:
            data = await attempt()
        except EngineError as e:
            log = logger.error if e.retryable else logger.info
            log("operation_failed", error_code=e.error_type, error_msg=e.message)
            return OperationResult.fail(error_payload(e))
        finally:
            clear_principal_context()
        return OperationResult.ok(data)

    # ------------------------------------------------------------------
    # Submission lifecycle
    # ------------------------------------------------------------------

    async def submit(
        self,
        principal: Principal,
        challenge_id: UUID | str,
        content: str,
        attachments: list[str] | None = None,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).submit(
                principal, challenge_id, content, attachments
            )

        return await self._run("submit", principal, work, _present_submission)

    async def edit_submission(
        self,
        principal: Principal,
        submission_id: UUID | str,
        content: str,
        attachments: list[str] | None = None,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).edit_submission(
                principal, submission_id, content, attachments
            )

        return await self._run("edit_submission", principal, work, _present_submission)

    async def review(
        self,
        principal: Principal,
        submission_id: UUID | str,
        decision: ReviewDecision | str,
        feedback: str | None,
        grade: int | None = None,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).review(
                principal, submission_id, decision, feedback, grade
            )

        return await self._run(
            "review",
            principal,
            work,
            lambda outcome: _present_submission(outcome.submission),
        )

    async def review_with_reward(
        self,
        principal: Principal,
        submission_id: UUID | str,
        decision: ReviewDecision | str,
        feedback: str | None,
        grade: int | None = None,
    ) -> OperationResult:
        """Like ``review`` but also reports the reward grant, if one was issued."""

        async def work(session: AsyncSession):
            return await SubmissionService(session).review(
                principal, submission_id, decision, feedback, grade
            )

        def present(outcome) -> dict[str, Any]:
            return {
                "submission": _present_submission(outcome.submission),
                "reward": (
                    RewardGrantResponse.model_validate(outcome.reward)
                    if outcome.reward is not None
                    else None
                ),
            }

        return await self._run("review", principal, work, present)

    async def list_visible_submissions(
        self,
        principal: Principal,
        challenge_id: UUID | str,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).list_visible_submissions(
                principal, challenge_id
            )

        def present(visible) -> VisibleSubmissionsResponse:
            return VisibleSubmissionsResponse(
                mine=_present_submission(visible.mine) if visible.mine else None,
                approved_others=[_present_submission(s) for s in visible.approved_others],
            )

        return await self._run("list_visible_submissions", principal, work, present)

    async def submission_history(
        self,
        principal: Principal,
        challenge_id: UUID | str,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).submission_history(principal, challenge_id)

        return await self._run(
            "submission_history",
            principal,
            work,
            lambda rows: [_present_submission(s) for s in rows],
        )

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(
        self,
        principal: Principal,
        submission_id: UUID | str,
        body: str,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).add_comment(principal, submission_id, body)

        return await self._run("add_comment", principal, work, CommentResponse.model_validate)

    async def list_comments(
        self,
        principal: Principal,
        submission_id: UUID | str,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await SubmissionService(session).list_comments(principal, submission_id)

        return await self._run(
            "list_comments",
            principal,
            work,
            lambda rows: [CommentResponse.model_validate(c) for c in rows],
        )

    # ------------------------------------------------------------------
    # Catalog and dashboards
    # ------------------------------------------------------------------

    async def list_challenges(
        self,
        principal: Principal,
        course_id: UUID | str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await ChallengeCatalogService(session).list_challenges(
                principal, course_id=course_id, limit=limit, offset=offset
            )

        return await self._run("list_challenges", principal, work, lambda rows: rows)

    async def get_challenge(
        self,
        principal: Principal,
        challenge_id: UUID | str,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            return await ChallengeCatalogService(session).get_challenge(principal, challenge_id)

        return await self._run("get_challenge", principal, work, lambda detail: detail)

    async def platform_stats(self, principal: Principal) -> OperationResult:
        """Admin dashboard headline numbers."""

        async def work(session: AsyncSession):
            _require_admin(principal)
            return await PlatformStatsService(session).collect()

        return await self._run("platform_stats", principal, work, lambda stats: stats)

    async def recent_submissions(
        self,
        principal: Principal,
        limit: int | None = None,
    ) -> OperationResult:
        async def work(session: AsyncSession):
            _require_admin(principal)
            return await PlatformStatsService(session).recent_submissions(limit)

        return await self._run("recent_submissions", principal, work, lambda rows: rows)
