"""ChallengeCatalogService list and detail views."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from learnhub.challenges.service import ChallengeCatalogService
from learnhub.exceptions import NotFoundError
from learnhub.infrastructure.database.session import transaction
from tests.factories import ChallengeFactory, CourseFactory, SubmissionFactory, UserFactory


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TestListChallenges:
    @pytest.mark.asyncio
    async def test_ordered_by_due_date_with_annotations(self, session_factory, persist):
        course = CourseFactory.create(title="Backend Basics")
        learner, principal = UserFactory.create_with_principal()
        later = ChallengeFactory.create(course_id=course.id, due_date=_now() + timedelta(days=10))
        sooner = ChallengeFactory.create(course_id=course.id, due_date=_now() + timedelta(days=2))
        closed = ChallengeFactory.create_expired()
        rejected = SubmissionFactory.create(
            sooner.id, learner.id, status="rejected", submitted_at=_now() - timedelta(hours=2)
        )
        retry = SubmissionFactory.create(sooner.id, learner.id, submitted_at=_now() - timedelta(hours=1))
        someone_else = SubmissionFactory.create(later.id, uuid4())
        await persist(course, learner, later, sooner, closed, rejected, retry, someone_else)

        async with transaction(session_factory) as session:
            summaries = await ChallengeCatalogService(session).list_challenges(principal)

        assert [s.id for s in summaries] == [closed.id, sooner.id, later.id]
        by_id = {s.id: s for s in summaries}
        assert by_id[closed.id].is_expired is True
        assert by_id[sooner.id].is_expired is False
        assert by_id[sooner.id].user_submission_status == "submitted"
        assert by_id[sooner.id].total_submissions == 2
        assert by_id[sooner.id].course_title == "Backend Basics"
        assert by_id[later.id].user_submission_status is None
        assert by_id[later.id].total_submissions == 1
        assert by_id[closed.id].course_title is None
        assert by_id[closed.id].can_submit is False
        assert by_id[sooner.id].can_submit is False
        assert by_id[later.id].can_submit is True

    @pytest.mark.asyncio
    async def test_filter_by_course(self, session_factory, persist, student_principal):
        course = CourseFactory.create()
        inside = ChallengeFactory.create(course_id=course.id)
        outside = ChallengeFactory.create()
        await persist(course, inside, outside)

        async with transaction(session_factory) as session:
            summaries = await ChallengeCatalogService(session).list_challenges(
                student_principal, course_id=course.id
            )

        assert [s.id for s in summaries] == [inside.id]


class TestGetChallenge:
    @pytest.mark.asyncio
    async def test_detail_shows_own_and_approved_work(self, session_factory, persist):
        learner, principal = UserFactory.create_with_principal()
        peer = UserFactory.create()
        challenge = ChallengeFactory.create(
            requirements=["Endpoints", "Tests"], rubric={"correctness": 60, "style": 40}
        )
        mine = SubmissionFactory.create(challenge.id, learner.id)
        peer_work = SubmissionFactory.create(challenge.id, peer.id, status="approved", grade=95)
        await persist(learner, peer, challenge, mine, peer_work)

        async with transaction(session_factory) as session:
            detail = await ChallengeCatalogService(session).get_challenge(principal, challenge.id)

        assert detail.requirements == ["Endpoints", "Tests"]
        assert detail.rubric == {"correctness": 60, "style": 40}
        assert detail.user_submission.id == mine.id
        assert [s.id for s in detail.other_submissions] == [peer_work.id]
        assert detail.total_submissions == 2
        assert detail.can_submit is False

    @pytest.mark.asyncio
    async def test_missing(self, session_factory, student_principal):
        async with transaction(session_factory) as session:
            with pytest.raises(NotFoundError):
                await ChallengeCatalogService(session).get_challenge(student_principal, uuid4())
