"""Data access helpers for bookmarks."""
from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from echo_stage.core.errors import BookmarkConflictError
from echo_stage.models.bookmark import Bookmark

__all__ = ["BookmarkRepository"]


class BookmarkRepository:
    """Insert and remove (user, post) bookmark pairs."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert(self, user_id: int, post_id: int) -> Bookmark:
        """Insert a bookmark row.

        The insert runs in its own SAVEPOINT so that a uniqueness violation
        only discards this statement.

        Raises:
            BookmarkConflictError: If the pair already exists.
        """
        bookmark = Bookmark(user_id=user_id, post_id=post_id)
        try:
            with self.session.begin_nested():
                self.session.add(bookmark)
                self.session.flush()
        except IntegrityError as exc:
            raise BookmarkConflictError(user_id, post_id) from exc
        return bookmark

    def delete(self, user_id: int, post_id: int) -> bool:
        """Delete the bookmark for the pair; return whether a row was removed."""
        result = self.session.execute(
            delete(Bookmark)
            .where(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
