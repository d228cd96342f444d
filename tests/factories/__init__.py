"""Test data factories for the LearnHub submission engine.

Factories build unsaved ORM rows with sensible defaults; persist them with
the ``persist`` fixture.
"""

from tests.factories.challenge_factory import ChallengeFactory, CourseFactory, SubmissionFactory
from tests.factories.user_factory import UserFactory

__all__ = [
    "ChallengeFactory",
    "CourseFactory",
    "SubmissionFactory",
    "UserFactory",
]
