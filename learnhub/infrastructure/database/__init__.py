"""Database models and async session management."""

from learnhub.infrastructure.database.models import (
    Base,
    Challenge,
    Course,
    CourseEnrollment,
    RewardGrant,
    Submission,
    SubmissionComment,
    User,
)
from learnhub.infrastructure.database.session import (
    close_db,
    get_database_url,
    get_engine,
    get_session_factory,
    init_db,
    transaction,
)

__all__ = [
    "Base",
    "Challenge",
    "Course",
    "CourseEnrollment",
    "RewardGrant",
    "Submission",
    "SubmissionComment",
    "User",
    "close_db",
    "get_database_url",
    "get_engine",
    "get_session_factory",
    "init_db",
    "transaction",
]
