"""Create users and posts tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: `users` (accounts) and `posts` (owned by a user).
How:   Portable column types (sa.Uuid, TIMESTAMP WITH TIME ZONE, JSON) so the
       same revision applies to PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "email",
            sa.String(320),
            nullable=False,
            comment="Login name; unique across users",
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "password",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash of the user's password",
        ),
        sa.Column(
            "status",
            sa.String(255),
            nullable=False,
            server_default=sa.text("'I am new!'"),
        ),
        # Denormalized ids of the user's posts, kept in step with posts.creator_id
        sa.Column("post_ids", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "image_url",
            sa.String(1024),
            nullable=False,
            server_default=sa.text("''"),
            comment="URL or public path of the post image",
        ),
        sa.Column("creator_id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_creator_id", "posts", ["creator_id"])
    # Feed pages are ordered by creation time
    op.create_index("idx_posts_created_at", "posts", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_creator_id", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
