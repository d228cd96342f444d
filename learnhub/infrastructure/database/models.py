"""SQLAlchemy ORM models for the submission engine.

PostgreSQL is the production store; the column types used here are the
dialect-agnostic ones (``Uuid``, JSON with a JSONB variant) so the same
metadata can be created on any SQLAlchemy async backend.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    false,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from learnhub.shared.utils.datetime_utils import utcnow

JSONVariant = JSON().with_variant(JSONB(), "postgresql")

ACTIVE_SUBMISSION_PREDICATE = "status IN ('submitted','approved')"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        dict[str, Any]: JSONVariant,
        dict[str, int]: JSONVariant,
        list[str]: JSONVariant,
    }


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_created", "created_at"),
        CheckConstraint(
            "role IN ('student','mentor','admin')", name="ck_user_role"
        ),
        CheckConstraint("xp >= 0", name="ck_user_xp_non_negative"),
        CheckConstraint("level = (xp / 1000) + 1", name="ck_user_level_derived"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text)
    role: Mapped[str] = mapped_column(
        Text, nullable=False, default="student", server_default=text("'student'")
    )
    xp: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"version_id_col": version}


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        Index("idx_courses_status", "status"),
        CheckConstraint(
            "status IN ('draft','published','archived')", name="ck_course_status"
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="draft", server_default=text("'draft'")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    challenges: Mapped[list["Challenge"]] = relationship(back_populates="course")


class CourseEnrollment(Base):
    __tablename__ = "course_enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "user_id", name="uq_enrollment_course_user"),
        Index("idx_enrollments_completed", "completed"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    course_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        Index("idx_challenges_due_date", "due_date"),
        Index("idx_challenges_course", "course_id"),
        CheckConstraint("xp_reward >= 0", name="ck_challenge_xp_reward"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    course_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="SET NULL")
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    requirements: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    xp_reward: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    rubric: Mapped[dict[str, int] | None] = mapped_column(JSONVariant)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    course: Mapped["Course"] = relationship(back_populates="challenges")


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class Submission(Base):
    """One learner's attempt at a challenge.

    Resubmitting after a rejection inserts a new row; at most one row per
    (challenge, user) may be ``submitted`` or ``approved`` at any time.
    """

    __tablename__ = "submissions"
    __table_args__ = (
        Index("idx_submissions_challenge", "challenge_id"),
        Index("idx_submissions_user", "user_id"),
        Index("idx_submissions_submitted_at", "submitted_at"),
        Index(
            "uq_submissions_active_attempt",
            "challenge_id",
            "user_id",
            unique=True,
            postgresql_where=text(ACTIVE_SUBMISSION_PREDICATE),
            sqlite_where=text(ACTIVE_SUBMISSION_PREDICATE),
        ),
        CheckConstraint(
            "status IN ('submitted','approved','rejected')",
            name="ck_submission_status",
        ),
        CheckConstraint(
            "grade IS NULL OR (grade >= 0 AND grade <= 100)",
            name="ck_submission_grade_range",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    challenge_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    files: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="submitted", server_default=text("'submitted'")
    )
    feedback: Mapped[str | None] = mapped_column(Text)
    grade: Mapped[int | None] = mapped_column(Integer)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    comments: Mapped[list["SubmissionComment"]] = relationship(
        back_populates="submission",
        order_by="SubmissionComment.created_at",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class SubmissionComment(Base):
    __tablename__ = "submission_comments"
    __table_args__ = (
        Index("idx_submission_comments_submission", "submission_id", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    submission_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    submission: Mapped["Submission"] = relationship(back_populates="comments")


# ---------------------------------------------------------------------------
# Reward ledger
# ---------------------------------------------------------------------------


class RewardGrant(Base):
    """XP granted to a user for their first approved submission of a challenge."""

    __tablename__ = "reward_grants"
    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", name="uq_reward_user_challenge"),
        CheckConstraint("amount >= 0", name="ck_reward_amount"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    challenge_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    submission_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
