"""Bookmark operations and the viewer's saved list."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from echo_stage.core.errors import (
    BookmarkConflictError,
    BookmarkNotFoundError,
    InternalError,
    PostNotFoundError,
)
from echo_stage.db.transaction import transaction
from echo_stage.models.bookmark import Bookmark
from echo_stage.models.post import Post
from echo_stage.repositories.bookmark_repo import BookmarkRepository
from echo_stage.repositories.post_repo import PostRepository, select_posts_with_author
from echo_stage.schemas.post import PostPage
from echo_stage.services import counters
from echo_stage.services.pagination import BOOKMARK_ORDERS, SortBy, paginate
from echo_stage.services.visibility import to_post_summary

logger = logging.getLogger(__name__)


def bookmark(session: Session, user_id: int, post_id: int) -> None:
    """Save an active post for ``user_id`` and bump its ``bookmark_count``.

    Raises:
        PostNotFoundError: If the post is missing or inactive.
        BookmarkConflictError: If the user already bookmarked the post.
    """
    if PostRepository(session).get_active(post_id) is None:
        raise PostNotFoundError(post_id)
    try:
        with transaction(session):
            BookmarkRepository(session).insert(user_id, post_id)
            if not counters.increment(session, post_id, counters.CounterField.BOOKMARKS):
                raise InternalError(f"Post {post_id} vanished during bookmark")
    except BookmarkConflictError:
        logger.warning("User %s already bookmarked post %s", user_id, post_id)
        raise
    logger.info("User %s bookmarked post %s", user_id, post_id)


def remove_bookmark(session: Session, user_id: int, post_id: int) -> None:
    """Remove a bookmark and decrement the post's ``bookmark_count``.

    Raises:
        BookmarkNotFoundError: If no such bookmark exists.
    """
    with transaction(session):
        if not BookmarkRepository(session).delete(user_id, post_id):
            raise BookmarkNotFoundError(user_id, post_id)
        counters.decrement(session, post_id, counters.CounterField.BOOKMARKS)
    logger.info("User %s removed bookmark on post %s", user_id, post_id)


def list_bookmarked_posts(
    session: Session,
    viewer_id: int,
    *,
    sort_by: SortBy = SortBy.NEWEST,
    cursor: str | None = None,
    limit: int | None = None,
) -> PostPage:
    """Return the viewer's saved, still-active posts by bookmark time.

    Only ``NEWEST`` and ``OLDEST`` apply here; any other order falls back to
    ``NEWEST``. Cursors carry the bookmark's timestamp and id.
    """
    order = BOOKMARK_ORDERS.get(sort_by, BOOKMARK_ORDERS[SortBy.NEWEST])
    stmt = (
        select_posts_with_author()
        .add_columns(Bookmark)
        .join(Bookmark, Bookmark.post_id == Post.id)
        .where(Bookmark.user_id == viewer_id)
    )

    def position_of(row: Any) -> tuple[Any, int]:
        saved: Bookmark = row[2]
        return saved.created_at, saved.id

    page = paginate(session, stmt, order, cursor=cursor, limit=limit, position_of=position_of)
    items = [to_post_summary(post, author, is_bookmarked=True) for post, author, _ in page.rows]
    return PostPage(items=items, has_more=page.has_more, next_cursor=page.next_cursor)
