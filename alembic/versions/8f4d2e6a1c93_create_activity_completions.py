"""create activity completions

Revision ID: 8f4d2e6a1c93
Revises: 3b9e1c7d2a40
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8f4d2e6a1c93"
down_revision: str | Sequence[str] | None = "3b9e1c7d2a40"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "activity_completions",
        sa.Column("enrollment_id", sa.Integer(), primary_key=True),
        sa.Column("activity_id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=320), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("time_spent_seconds", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.Integer(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("activity_completions")
