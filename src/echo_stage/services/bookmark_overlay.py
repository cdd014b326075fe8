"""Batched "is bookmarked by the viewer" lookup for result pages."""
from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.orm import Session

from echo_stage.models.bookmark import Bookmark


def bookmarked_post_ids(
    session: Session,
    viewer_id: int | None,
    post_ids: Collection[int],
) -> set[int]:
    """Return the subset of ``post_ids`` the viewer has bookmarked.

    Issues a single query for the whole page; anonymous viewers and empty
    pages short-circuit without touching the store.
    """
    if viewer_id is None or not post_ids:
        return set()
    rows = session.execute(
        select(Bookmark.post_id).where(
            Bookmark.user_id == viewer_id,
            Bookmark.post_id.in_(list(post_ids)),
        )
    )
    return set(rows.scalars())
