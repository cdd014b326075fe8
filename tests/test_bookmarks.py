"""Bookmark add/remove, the viewer overlay and the saved list."""

import pytest
from sqlalchemy import func, select

from echo_stage.core.errors import (
    BookmarkConflictError,
    BookmarkNotFoundError,
    InternalError,
    PostNotFoundError,
)
from echo_stage.models import Bookmark
from echo_stage.services import bookmark_service, counters, post_service
from echo_stage.services.bookmark_overlay import bookmarked_post_ids
from echo_stage.services.pagination import SortBy


def _bookmark_count(db_session, post_id: int) -> int:
    return post_service.get_post_by_id(db_session, post_id).bookmark_count


def _rows(db_session, post_id: int) -> int:
    return db_session.scalar(
        select(func.count()).select_from(Bookmark).where(Bookmark.post_id == post_id)
    )


def test_duplicate_bookmark_conflicts_once(db_session, test_post, other_user) -> None:
    bookmark_service.bookmark(db_session, other_user.id, test_post.id)

    with pytest.raises(BookmarkConflictError):
        bookmark_service.bookmark(db_session, other_user.id, test_post.id)

    assert _bookmark_count(db_session, test_post.id) == 1
    assert _rows(db_session, test_post.id) == 1


def test_count_matches_rows_after_interleaving(
    db_session, test_post, test_user, other_user, make_user
) -> None:
    third = make_user()
    bookmark_service.bookmark(db_session, test_user.id, test_post.id)
    bookmark_service.bookmark(db_session, other_user.id, test_post.id)
    bookmark_service.remove_bookmark(db_session, test_user.id, test_post.id)
    bookmark_service.bookmark(db_session, third.id, test_post.id)
    bookmark_service.bookmark(db_session, test_user.id, test_post.id)
    bookmark_service.remove_bookmark(db_session, other_user.id, test_post.id)

    assert _bookmark_count(db_session, test_post.id) == _rows(db_session, test_post.id) == 2


def test_remove_missing_bookmark_is_not_found(db_session, test_post, other_user) -> None:
    with pytest.raises(BookmarkNotFoundError):
        bookmark_service.remove_bookmark(db_session, other_user.id, test_post.id)

    assert _bookmark_count(db_session, test_post.id) == 0


def test_cannot_bookmark_inactive_post(db_session, test_post, test_user, other_user) -> None:
    post_service.delete_post(db_session, test_post.id, test_user.id)

    with pytest.raises(PostNotFoundError):
        bookmark_service.bookmark(db_session, other_user.id, test_post.id)


def test_overlay_flags_only_viewer_bookmarks(
    db_session, make_post, test_user, other_user
) -> None:
    first = make_post(test_user)
    second = make_post(test_user)
    bookmark_service.bookmark(db_session, other_user.id, second.id)

    as_viewer = post_service.list_posts(db_session, viewer_id=other_user.id)
    anonymous = post_service.list_posts(db_session)

    flags = {item.id: item.is_bookmarked for item in as_viewer.items}
    assert flags == {first.id: False, second.id: True}
    assert not any(item.is_bookmarked for item in anonymous.items)
    assert post_service.get_post_by_id(db_session, second.id, other_user.id).is_bookmarked


def test_overlay_short_circuits(db_session, test_post, other_user) -> None:
    assert bookmarked_post_ids(db_session, None, [test_post.id]) == set()
    assert bookmarked_post_ids(db_session, other_user.id, []) == set()


def test_saved_list_orders_by_bookmark_time(db_session, make_post, test_user, other_user) -> None:
    older = make_post(test_user)
    newer = make_post(test_user)
    # Bookmark the newer post first so bookmark time and post time disagree.
    bookmark_service.bookmark(db_session, other_user.id, newer.id)
    bookmark_service.bookmark(db_session, other_user.id, older.id)

    newest = bookmark_service.list_bookmarked_posts(db_session, other_user.id)
    oldest = bookmark_service.list_bookmarked_posts(
        db_session, other_user.id, sort_by=SortBy.OLDEST
    )
    fallback = bookmark_service.list_bookmarked_posts(
        db_session, other_user.id, sort_by=SortBy.MOST_RESPONSES
    )

    assert [item.id for item in newest.items] == [older.id, newer.id]
    assert [item.id for item in oldest.items] == [newer.id, older.id]
    assert [item.id for item in fallback.items] == [older.id, newer.id]
    assert all(item.is_bookmarked for item in newest.items)


def test_saved_list_paginates_and_skips_inactive(
    db_session, make_post, test_user, other_user
) -> None:
    posts = [make_post(test_user) for _ in range(3)]
    for post in posts:
        bookmark_service.bookmark(db_session, other_user.id, post.id)
    post_service.delete_post(db_session, posts[1].id, test_user.id)

    first = bookmark_service.list_bookmarked_posts(
        db_session, other_user.id, sort_by=SortBy.OLDEST, limit=1
    )
    second = bookmark_service.list_bookmarked_posts(
        db_session, other_user.id, sort_by=SortBy.OLDEST, cursor=first.next_cursor, limit=1
    )

    assert [item.id for item in first.items] == [posts[0].id]
    assert first.has_more is True
    assert [item.id for item in second.items] == [posts[2].id]
    assert second.has_more is False


def test_lost_counter_update_rolls_back_bookmark(
    db_session, test_post, other_user, monkeypatch
) -> None:
    monkeypatch.setattr(counters, "increment", lambda *args, **kwargs: False)

    with pytest.raises(InternalError):
        bookmark_service.bookmark(db_session, other_user.id, test_post.id)

    assert _rows(db_session, test_post.id) == 0
