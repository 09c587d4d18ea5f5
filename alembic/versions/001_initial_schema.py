"""Initial schema – users, contents, feedbacks.

Revision ID: 001
Revises:
Create Date: 2025-03-01 00:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), server_default=""),
        sa.Column("last_name", sa.String(100), server_default=""),
        sa.Column("subscription_status", sa.String(32), server_default="free"),
        sa.Column("subscription_id", sa.String(128), server_default=""),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.false()),
        sa.Column("preferences", sa.JSON()),
        sa.Column("last_ai_request_time", sa.DateTime(), nullable=True),
        sa.Column("ai_request_count", sa.Integer(), server_default="0"),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_subscription_status", "users", ["subscription_status"])

    # contents
    op.create_table(
        "contents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("topic", sa.Text()),
        sa.Column("goal", sa.Text()),
        sa.Column("platform", sa.String(64)),
        sa.Column("tone", sa.String(64)),
        sa.Column("model", sa.String(128)),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_private", sa.Boolean(), server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_contents_user_created", "contents", ["user_id", "created_at"])

    # feedbacks
    op.create_table(
        "feedbacks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("feedbacks")
    op.drop_index("ix_contents_user_created", table_name="contents")
    op.drop_table("contents")
    op.drop_index("ix_users_subscription_status", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
