"""Create user_profiles and messages tables.

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=2048), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=False),
        sa.Column("recipient_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["sender_id"],
            ["user_profiles.id"],
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["recipient_id"],
            ["user_profiles.id"],
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_messages_sender_id_created_at",
        "messages",
        ["sender_id", "created_at"],
    )
    op.create_index(
        "ix_messages_recipient_id_created_at",
        "messages",
        ["recipient_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_messages_recipient_id_created_at", table_name="messages")
    op.drop_index("ix_messages_sender_id_created_at", table_name="messages")
    op.drop_table("messages")
    op.drop_table("user_profiles")
