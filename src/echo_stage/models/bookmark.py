# src/echo_stage/models/bookmark.py
"""Models capturing saved posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from echo_stage.db.session import Base
from echo_stage.db.time import utcnow


class Bookmark(Base):
    """A user's saved post.

    Presence implies membership in the owner's saved list and contributes one
    to the post's ``bookmark_count``.
    """

    __tablename__ = "bookmark"
    __table_args__ = (
        # Duplicate bookmarks are rejected by the store, not by a pre-check.
        UniqueConstraint("user_id", "post_id", name="uq_bookmark_user_post"),
        Index("ix_bookmark_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
