"""Atomic maintenance of per-post engagement counters.

Counters are only ever changed with a single ``UPDATE`` whose new value is
computed by the database from the current one, so concurrent writers never
lose an update and no application-level locking is needed.
"""
from __future__ import annotations

import enum
import logging

from sqlalchemy import case, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from echo_stage.db.time import utcnow
from echo_stage.models.post import Post

logger = logging.getLogger(__name__)


class CounterField(str, enum.Enum):
    """Engagement counters kept on the post row."""

    RESPONSES = "response_count"
    BOOKMARKS = "bookmark_count"

    @property
    def column(self) -> InstrumentedAttribute[int]:
        return getattr(Post, self.value)


def increment(session: Session, post_id: int, field: CounterField) -> bool:
    """Add one to ``field`` on the post; return whether the post exists."""
    column = field.column
    result = session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values({column: column + 1, Post.updated_at: utcnow()})
        .execution_options(synchronize_session=False)
    )
    updated = result.rowcount == 1
    if not updated:
        logger.warning("Counter increment on missing post %s (%s)", post_id, field.value)
    return updated


def decrement(
    session: Session,
    post_id: int,
    field: CounterField,
    *,
    clamp_at_zero: bool = True,
) -> bool:
    """Subtract one from ``field`` on the post; return whether the post exists.

    With ``clamp_at_zero`` (the default) the value floors at zero even when
    concurrent callers over-decrement.
    """
    column = field.column
    if clamp_at_zero:
        new_value = case((column > 0, column - 1), else_=0)
    else:
        new_value = column - 1
    result = session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values({column: new_value, Post.updated_at: utcnow()})
        .execution_options(synchronize_session=False)
    )
    updated = result.rowcount == 1
    if not updated:
        logger.warning("Counter decrement on missing post %s (%s)", post_id, field.value)
    return updated
