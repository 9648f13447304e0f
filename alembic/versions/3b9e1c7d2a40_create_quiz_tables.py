"""create quiz tables

Revision ID: 3b9e1c7d2a40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c7d2a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "quiz_contents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("passing_score", sa.Float(), nullable=True),
        sa.Column("max_attempts", sa.Integer(), nullable=True),
    )
    op.create_table(
        "quiz_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "quiz_content_id",
            sa.Integer(),
            sa.ForeignKey("quiz_contents.id"),
            nullable=False,
        ),
        sa.Column("question_type", sa.String(length=32), nullable=False),
        sa.Column("points", sa.Float(), nullable=True),
        sa.Column(
            "options",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "subquestions",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
    )
    op.create_index(
        "ix_quiz_questions_quiz_content_id", "quiz_questions", ["quiz_content_id"]
    )

    op.create_table(
        "quiz_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "quiz_content_id",
            sa.Integer(),
            sa.ForeignKey("quiz_contents.id"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=320), nullable=False),
        sa.Column("enrollment_id", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("max_score", sa.Float(), nullable=False),
        sa.Column("percentage_score", sa.Float(), nullable=False),
        sa.Column("is_passed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.Integer(), nullable=False),
        sa.Column("time_spent_seconds", sa.Integer(), nullable=False),
        sa.Column("attempt_number", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(length=320), nullable=False),
        sa.UniqueConstraint(
            "quiz_content_id",
            "user_id",
            "enrollment_id",
            "attempt_number",
            name="uq_quiz_submissions_attempt",
        ),
    )
    op.create_index(
        "ix_quiz_submissions_quiz_content_id", "quiz_submissions", ["quiz_content_id"]
    )
    op.create_index(
        "ix_quiz_submissions_enrollment_id", "quiz_submissions", ["enrollment_id"]
    )

    op.create_table(
        "quiz_question_responses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "quiz_submission_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("quiz_submissions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "quiz_question_id",
            sa.Integer(),
            sa.ForeignKey("quiz_questions.id"),
            nullable=False,
        ),
        sa.Column("user_response", postgresql.JSONB(), nullable=True),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("points_earned", sa.Float(), nullable=False),
        sa.Column("max_points", sa.Float(), nullable=False),
    )
    op.create_index(
        "ix_quiz_question_responses_quiz_submission_id",
        "quiz_question_responses",
        ["quiz_submission_id"],
    )


def downgrade() -> None:
    op.drop_table("quiz_question_responses")
    op.drop_table("quiz_submissions")
    op.drop_table("quiz_questions")
    op.drop_table("quiz_contents")
