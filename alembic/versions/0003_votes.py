"""votes

Revision ID: 0003_votes
Revises: 0002_questions_answers
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

from alembic import op

revision = "0003_votes"
down_revision = "0002_questions_answers"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "votes",
        sa.Column("id", sa.BigInteger(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(length=8), nullable=False),
        sa.Column("kind_id", sa.BigInteger(), nullable=False),
        sa.Column("mode", sa.String(length=4), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("kind IN ('question', 'answer')", name="votes_kind_check"),
        sa.CheckConstraint("mode IN ('up', 'down')", name="votes_mode_check"),
        sa.UniqueConstraint("user_id", "kind", "kind_id", name="votes_user_target_uidx"),
    )
    op.create_index("votes_target_idx", "votes", ["kind", "kind_id"], unique=False)


def downgrade() -> None:
    op.drop_index("votes_target_idx", table_name="votes")
    op.drop_table("votes")
