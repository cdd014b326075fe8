"""initial schema

Revision ID: 5b1e0c7a9d42
Revises:
Create Date: 2026-10-18 09:12:40.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1e0c7a9d42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

post_type = sa.Enum("POST", "RESPONSE", name="post_type")
post_status = sa.Enum("AWAITING_PROCESSING", "PROCESSED", "DELETED", name="post_status")


def upgrade() -> None:
    """Create accounts, profiles, posts, tags, bookmarks, notifications and pulse stats."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("disabled", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "user_profile",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_user_profile_username", "user_profile", ["username"])
    op.create_index("ix_user_profile_city", "user_profile", ["city"])

    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", post_type, nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("audio_url", sa.Text(), nullable=False),
        sa.Column("audio_key", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("waveform_url", sa.Text(), nullable=True),
        sa.Column("response_count", sa.Integer(), nullable=False),
        sa.Column("bookmark_count", sa.Integer(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("status", post_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("duration > 0", name="ck_post_duration_positive"),
        sa.CheckConstraint("response_count >= 0", name="ck_post_response_count"),
        sa.CheckConstraint("bookmark_count >= 0", name="ck_post_bookmark_count"),
        sa.CheckConstraint(
            "(type = 'RESPONSE') = (parent_id IS NOT NULL)",
            name="ck_post_parent_matches_type",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in (
        "user_id",
        "parent_id",
        "city",
        "type",
        "active",
        "status",
        "created_at",
        "bookmark_count",
        "response_count",
    ):
        op.create_index(f"ix_post_{column}", "post", [column])

    op.create_table(
        "post_tag",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("tag", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "tag", name="uq_post_tag_post_tag"),
    )
    op.create_index("ix_post_tag_tag", "post_tag", ["tag"])

    op.create_table(
        "bookmark",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_bookmark_user_post"),
    )
    op.create_index("ix_bookmark_user_id", "bookmark", ["user_id"])

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"])

    op.create_table(
        "pulse_stat",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("period", sa.Text(), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pulse_stat_city_period", "pulse_stat", ["city", "period"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_pulse_stat_city_period", table_name="pulse_stat")
    op.drop_table("pulse_stat")
    op.drop_index("ix_notification_user_id", table_name="notification")
    op.drop_table("notification")
    op.drop_index("ix_bookmark_user_id", table_name="bookmark")
    op.drop_table("bookmark")
    op.drop_index("ix_post_tag_tag", table_name="post_tag")
    op.drop_table("post_tag")
    for column in (
        "response_count",
        "bookmark_count",
        "created_at",
        "status",
        "active",
        "type",
        "city",
        "parent_id",
        "user_id",
    ):
        op.drop_index(f"ix_post_{column}", table_name="post")
    op.drop_table("post")
    op.drop_index("ix_user_profile_city", table_name="user_profile")
    op.drop_index("ix_user_profile_username", table_name="user_profile")
    op.drop_table("user_profile")
    op.drop_table("user_account")
    post_status.drop(op.get_bind(), checkfirst=True)
    post_type.drop(op.get_bind(), checkfirst=True)
