"""Initial schema — users, courses, challenges, submissions, comments, reward ledger.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text()),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'student'")),
        sa.Column("xp", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('student','mentor','admin')", name="ck_user_role"),
        sa.CheckConstraint("xp >= 0", name="ck_user_xp_non_negative"),
        sa.CheckConstraint("level = (xp / 1000) + 1", name="ck_user_level_derived"),
    )
    op.create_index("idx_users_created", "users", ["created_at"])

    # --- Courses ---
    op.create_table(
        "courses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('draft','published','archived')", name="ck_course_status"),
    )
    op.create_index("idx_courses_status", "courses", ["status"])

    op.create_table(
        "course_enrollments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("course_id", UUID(as_uuid=True), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("course_id", "user_id", name="uq_enrollment_course_user"),
    )
    op.create_index("idx_enrollments_completed", "course_enrollments", ["completed"])

    # --- Challenges ---
    op.create_table(
        "challenges",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("course_id", UUID(as_uuid=True), sa.ForeignKey("courses.id", ondelete="SET NULL")),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("requirements", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("xp_reward", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("rubric", JSONB()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("xp_reward >= 0", name="ck_challenge_xp_reward"),
    )
    op.create_index("idx_challenges_due_date", "challenges", ["due_date"])
    op.create_index("idx_challenges_course", "challenges", ["course_id"])

    # --- Submissions ---
    op.create_table(
        "submissions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("challenge_id", UUID(as_uuid=True), sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("files", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'submitted'")),
        sa.Column("feedback", sa.Text()),
        sa.Column("grade", sa.Integer()),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        sa.Column("reviewed_by", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("status IN ('submitted','approved','rejected')", name="ck_submission_status"),
        sa.CheckConstraint("grade IS NULL OR (grade >= 0 AND grade <= 100)", name="ck_submission_grade_range"),
    )
    op.create_index("idx_submissions_challenge", "submissions", ["challenge_id"])
    op.create_index("idx_submissions_user", "submissions", ["user_id"])
    op.create_index("idx_submissions_submitted_at", "submissions", ["submitted_at"])
    # At most one pending or approved attempt per (challenge, user)
    op.create_index(
        "uq_submissions_active_attempt",
        "submissions",
        ["challenge_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('submitted','approved')"),
    )

    op.create_table(
        "submission_comments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("submission_id", UUID(as_uuid=True), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_submission_comments_submission", "submission_comments", ["submission_id", "created_at"])

    # --- Reward ledger ---
    op.create_table(
        "reward_grants",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("challenge_id", UUID(as_uuid=True), sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False),
        sa.Column("submission_id", UUID(as_uuid=True), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("user_id", "challenge_id", name="uq_reward_user_challenge"),
        sa.CheckConstraint("amount >= 0", name="ck_reward_amount"),
    )


def downgrade() -> None:
    op.drop_table("reward_grants")
    op.drop_table("submission_comments")
    op.drop_index("uq_submissions_active_attempt", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("challenges")
    op.drop_table("course_enrollments")
    op.drop_table("courses")
    op.drop_table("users")
