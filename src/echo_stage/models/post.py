# src/echo_stage/models/post.py
"""SQLAlchemy models for audio posts, responses and their tags."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from echo_stage.db.session import Base
from echo_stage.db.time import utcnow


class PostType(str, enum.Enum):
    """Discriminates top-level posts from threaded responses."""

    POST = "POST"
    RESPONSE = "RESPONSE"


class PostStatus(str, enum.Enum):
    """Content lifecycle driven by the audio-processing worker."""

    AWAITING_PROCESSING = "AWAITING_PROCESSING"
    PROCESSED = "PROCESSED"
    DELETED = "DELETED"


class Post(Base):
    """A short audio post or a response to one.

    Responses live in the same table and point at their parent through
    ``parent_id``. Posts are never physically deleted: ``active`` hides them
    everywhere, while ``status = DELETED`` only withholds their media.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("duration > 0", name="ck_post_duration_positive"),
        CheckConstraint("response_count >= 0", name="ck_post_response_count"),
        CheckConstraint("bookmark_count >= 0", name="ck_post_bookmark_count"),
        CheckConstraint(
            "(type = 'RESPONSE') = (parent_id IS NOT NULL)",
            name="ck_post_parent_matches_type",
        ),
        Index("ix_post_user_id", "user_id"),
        Index("ix_post_parent_id", "parent_id"),
        Index("ix_post_city", "city"),
        Index("ix_post_type", "type"),
        Index("ix_post_active", "active"),
        Index("ix_post_status", "status"),
        Index("ix_post_created_at", "created_at"),
        Index("ix_post_bookmark_count", "bookmark_count"),
        Index("ix_post_response_count", "response_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[PostType] = mapped_column(
        Enum(PostType, name="post_type", native_enum=True, validate_strings=True),
        nullable=False,
    )
    # Top-level posts have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=True,
    )

    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    audio_key: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    waveform_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Maintained by services.counters; never recomputed from related rows.
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bookmark_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    city: Mapped[str] = mapped_column(Text, nullable=False, default="singapore")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, name="post_status", native_enum=True, validate_strings=True),
        nullable=False,
        default=PostStatus.AWAITING_PROCESSING,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    tag_rows: Mapped[list[PostTag]] = relationship(
        "PostTag",
        back_populates="post",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        """Return the post's tags as a sorted list."""
        return sorted(row.tag for row in self.tag_rows)


class PostTag(Base):
    """One member of a post's tag set."""

    __tablename__ = "post_tag"
    __table_args__ = (
        UniqueConstraint("post_id", "tag", name="uq_post_tag_post_tag"),
        Index("ix_post_tag_tag", "tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(String(64), nullable=False)

    post: Mapped[Post] = relationship("Post", back_populates="tag_rows")
