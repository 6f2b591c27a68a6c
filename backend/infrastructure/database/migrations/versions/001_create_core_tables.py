"""Create core tables (users, photos, photo_likes, photo_comments, subscriptions)

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_creator", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("subscription_price", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_creator_active", "users", ["is_creator", "is_active"])

    op.create_table(
        "photos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("creator_id", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_photos_creator_id", "photos", ["creator_id"])
    op.create_index("ix_photos_creator_premium", "photos", ["creator_id", "is_premium"])
    op.create_index("ix_photos_premium", "photos", ["is_premium"])

    op.create_table(
        "photo_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("photo_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["photo_id"], ["photos.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "photo_id", name="uq_photo_likes_user_photo"),
    )
    op.create_index("ix_photo_likes_user_id", "photo_likes", ["user_id"])
    op.create_index("ix_photo_likes_photo_id", "photo_likes", ["photo_id"])

    op.create_table(
        "photo_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("photo_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["photo_id"], ["photos.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_photo_comments_user_id", "photo_comments", ["user_id"])
    op.create_index("ix_photo_comments_photo_id", "photo_comments", ["photo_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subscriber_id", sa.Integer(), nullable=False),
        sa.Column("creator_id", sa.Integer(), nullable=False),
        sa.Column(
            "start_date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["subscriber_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_subscriptions_subscriber_id", "subscriptions", ["subscriber_id"])
    op.create_index("ix_subscriptions_creator_id", "subscriptions", ["creator_id"])
    op.create_index(
        "ix_subscriptions_creator_active", "subscriptions", ["creator_id", "end_date"]
    )
    # One active subscription per pair; ended rows stay as history
    op.create_index(
        "uq_subscriptions_active_pair",
        "subscriptions",
        ["subscriber_id", "creator_id"],
        unique=True,
        postgresql_where=sa.text("end_date IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_subscriptions_active_pair", table_name="subscriptions")
    op.drop_index("ix_subscriptions_creator_active", table_name="subscriptions")
    op.drop_index("ix_subscriptions_creator_id", table_name="subscriptions")
    op.drop_index("ix_subscriptions_subscriber_id", table_name="subscriptions")
    op.drop_table("subscriptions")

    op.drop_index("ix_photo_comments_photo_id", table_name="photo_comments")
    op.drop_index("ix_photo_comments_user_id", table_name="photo_comments")
    op.drop_table("photo_comments")

    op.drop_index("ix_photo_likes_photo_id", table_name="photo_likes")
    op.drop_index("ix_photo_likes_user_id", table_name="photo_likes")
    op.drop_table("photo_likes")

    op.drop_index("ix_photos_premium", table_name="photos")
    op.drop_index("ix_photos_creator_premium", table_name="photos")
    op.drop_index("ix_photos_creator_id", table_name="photos")
    op.drop_table("photos")

    op.drop_index("ix_users_creator_active", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
