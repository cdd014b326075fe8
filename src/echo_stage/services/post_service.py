"""Service-level operations for posts and responses."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from echo_stage.core.errors import InternalError, NotAuthorizedError, PostNotFoundError
from echo_stage.core.settings import settings
from echo_stage.db.transaction import transaction
from echo_stage.models.post import Post, PostStatus, PostType
from echo_stage.models.user import UserProfile
from echo_stage.repositories.post_repo import PostRepository, select_posts_with_author
from echo_stage.repositories.profile_repo import get_profile_by_user_id
from echo_stage.schemas.post import PostDetail, PostPage
from echo_stage.services import counters
from echo_stage.services.bookmark_overlay import bookmarked_post_ids
from echo_stage.services.notifications import (
    DatabaseNotificationSink,
    NotificationSink,
    ResponseNotification,
)
from echo_stage.services.pagination import (
    POST_ORDERS,
    PostFilters,
    SortBy,
    filter_predicates,
    paginate,
)
from echo_stage.services.visibility import to_post_detail, to_post_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioLocator:
    """Public URL and storage key of an uploaded audio object."""

    url: str
    key: str


def audio_locator_for_key(key: str) -> AudioLocator:
    """Derive the public URL for an uploaded object from its storage key."""
    base = settings.audio_public_base_url.rstrip("/")
    return AudioLocator(url=f"{base}/{key.lstrip('/')}", key=key)


def _require_profile(session: Session, user_id: int) -> UserProfile:
    profile = get_profile_by_user_id(session, user_id)
    if profile is None:
        raise ValueError("A profile is required before posting")
    return profile


def _project_detail(session: Session, post_id: int, viewer_id: int | None) -> PostDetail:
    detail = get_post_by_id(session, post_id, viewer_id)
    if detail is None:
        raise PostNotFoundError(post_id)
    return detail


def create_post(
    session: Session,
    *,
    user_id: int,
    audio: AudioLocator,
    duration: int,
    tags: Sequence[str] = (),
    city: str | None = None,
) -> PostDetail:
    """Create a top-level post.

    Args:
        session: Request-scoped session.
        user_id: Author of the post.
        audio: Location of the uploaded audio.
        duration: Length in seconds; must be positive.
        tags: Tag strings attached to the post.
        city: Locale tag; defaults to the author's profile city.

    Raises:
        ValueError: If the author has no profile or the duration is not positive.
    """
    if duration <= 0:
        raise ValueError("Duration must be positive")
    profile = _require_profile(session, user_id)
    with transaction(session):
        post = PostRepository(session).create(
            user_id=user_id,
            post_type=PostType.POST,
            audio_url=audio.url,
            audio_key=audio.key,
            duration=duration,
            tags=tags,
            city=city or profile.city or settings.default_city,
        )
    logger.info("User %s created post %s", user_id, post.id)
    return _project_detail(session, post.id, user_id)


def create_response(
    session: Session,
    *,
    user_id: int,
    parent_id: int,
    audio: AudioLocator,
    duration: int,
    tags: Sequence[str] = (),
    notifications: NotificationSink | None = None,
) -> PostDetail:
    """Respond to an active post in one atomic unit.

    The response row, the parent's ``response_count`` and the notification to
    the parent's owner are written together or not at all. The response takes
    the parent's city, not the responder's.

    Raises:
        PostNotFoundError: If the parent is missing or inactive.
        ValueError: If the responder has no profile or the duration is not positive.
    """
    if duration <= 0:
        raise ValueError("Duration must be positive")
    _require_profile(session, user_id)
    sink = notifications if notifications is not None else DatabaseNotificationSink(session)
    repo = PostRepository(session)

    with transaction(session):
        parent = repo.get_active(parent_id)
        if parent is None:
            raise PostNotFoundError(parent_id, "Parent post not found")
        response = repo.create(
            user_id=user_id,
            post_type=PostType.RESPONSE,
            parent_id=parent.id,
            audio_url=audio.url,
            audio_key=audio.key,
            duration=duration,
            tags=tags,
            city=parent.city,
        )
        if not counters.increment(session, parent.id, counters.CounterField.RESPONSES):
            raise InternalError(f"Parent post {parent.id} vanished during response")
        if parent.user_id != user_id:
            sink.enqueue(
                parent.user_id,
                ResponseNotification(
                    postId=parent.id,
                    responseId=response.id,
                    responderId=user_id,
                ),
            )

    logger.info("User %s responded to post %s with %s", user_id, parent_id, response.id)
    return _project_detail(session, response.id, user_id)


def delete_post(session: Session, post_id: int, user_id: int) -> bool:
    """Deactivate a post owned by ``user_id``.

    Deleting a response also decrements its parent's ``response_count``.
    A post that is already inactive reports not found, so the parent counter
    is only ever decremented once.

    Raises:
        PostNotFoundError: If the post is missing or already inactive.
        NotAuthorizedError: If ``user_id`` does not own the post.
    """
    repo = PostRepository(session)
    post = repo.get_active(post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    if post.user_id != user_id:
        raise NotAuthorizedError("Not authorized to delete this post")

    parent_id = post.parent_id
    with transaction(session):
        if not repo.deactivate(post_id):
            raise PostNotFoundError(post_id)
        if parent_id is not None:
            counters.decrement(session, parent_id, counters.CounterField.RESPONSES)

    logger.info("User %s deleted post %s", user_id, post_id)
    return True


def get_post_by_id(
    session: Session,
    post_id: int,
    viewer_id: int | None = None,
) -> PostDetail | None:
    """Return the full projection of an active post, or None."""
    found = PostRepository(session).get_with_author(post_id)
    if found is None:
        return None
    post, author = found
    is_bookmarked = post.id in bookmarked_post_ids(session, viewer_id, [post.id])
    return to_post_detail(post, author, is_bookmarked=is_bookmarked)


def list_posts(
    session: Session,
    *,
    filters: PostFilters | None = None,
    sort_by: SortBy = SortBy.NEWEST,
    cursor: str | None = None,
    limit: int | None = None,
    viewer_id: int | None = None,
) -> PostPage:
    """Return one keyset page of active posts matching ``filters``."""
    order = POST_ORDERS[sort_by]
    stmt = select_posts_with_author().where(*filter_predicates(filters or PostFilters()))

    def position_of(row: Any) -> tuple[Any, int]:
        post: Post = row[0]
        return getattr(post, order.key.key), post.id

    page = paginate(session, stmt, order, cursor=cursor, limit=limit, position_of=position_of)
    saved = bookmarked_post_ids(session, viewer_id, [row[0].id for row in page.rows])
    items = [
        to_post_summary(post, author, is_bookmarked=post.id in saved)
        for post, author in page.rows
    ]
    return PostPage(items=items, has_more=page.has_more, next_cursor=page.next_cursor)


def home_feed(
    session: Session,
    *,
    city: str | None = None,
    tags: Sequence[str] = (),
    sort_by: SortBy = SortBy.NEWEST,
    cursor: str | None = None,
    limit: int | None = None,
    viewer_id: int | None = None,
) -> PostPage:
    """Top-level posts, optionally narrowed to a city and any of ``tags``."""
    return list_posts(
        session,
        filters=PostFilters(post_type=PostType.POST, city=city, tags=tuple(tags)),
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=viewer_id,
    )


def posts_by_user(
    session: Session,
    user_id: int,
    *,
    post_type: PostType = PostType.POST,
    sort_by: SortBy = SortBy.NEWEST,
    cursor: str | None = None,
    limit: int | None = None,
    viewer_id: int | None = None,
) -> PostPage:
    """Posts (or responses) authored by ``user_id``."""
    return list_posts(
        session,
        filters=PostFilters(post_type=post_type, user_id=user_id),
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=viewer_id,
    )


def responses_to(
    session: Session,
    parent_id: int,
    *,
    sort_by: SortBy = SortBy.NEWEST,
    cursor: str | None = None,
    limit: int | None = None,
    viewer_id: int | None = None,
) -> PostPage:
    """Active responses to ``parent_id``."""
    return list_posts(
        session,
        filters=PostFilters(post_type=PostType.RESPONSE, parent_id=parent_id),
        sort_by=sort_by,
        cursor=cursor,
        limit=limit,
        viewer_id=viewer_id,
    )


def update_waveform_url(session: Session, post_id: int, waveform_url: str) -> None:
    """Record the waveform rendered by the processing worker."""
    if not PostRepository(session).set_waveform_url(post_id, waveform_url):
        raise PostNotFoundError(post_id)
    logger.info("Stored waveform for post %s", post_id)


def update_status(session: Session, post_id: int, status: PostStatus) -> None:
    """Move a post through its processing lifecycle."""
    if not PostRepository(session).set_status(post_id, status):
        raise PostNotFoundError(post_id)
    logger.info("Post %s moved to %s", post_id, status.value)
