"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from echo_stage.db.time import utcnow
from echo_stage.models.post import Post, PostStatus, PostTag, PostType
from echo_stage.models.user import UserProfile

__all__ = ["PostRepository", "select_posts_with_author"]


def select_posts_with_author() -> Select[tuple[Post, UserProfile]]:
    """Return the base statement joining active posts to their author profile.

    Posts whose owner has no profile are excluded, as are inactive posts.
    ``populate_existing`` makes every read reflect the current row state even
    when the post is already in the session's identity map.
    """
    return (
        select(Post, UserProfile)
        .join(UserProfile, UserProfile.user_id == Post.user_id)
        .where(Post.active.is_(True))
        .execution_options(populate_existing=True)
    )


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier regardless of visibility."""
        result = self.session.execute(
            select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def get_active(self, post_id: int) -> Post | None:
        """Return a post only if it is still active."""
        result = self.session.execute(
            select(Post)
            .where(Post.id == post_id, Post.active.is_(True))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def get_with_author(self, post_id: int) -> tuple[Post, UserProfile] | None:
        """Return an active post together with its author's profile."""
        row = self.session.execute(
            select_posts_with_author().where(Post.id == post_id).limit(1)
        ).first()
        if row is None:
            return None
        return row[0], row[1]

    def create(
        self,
        *,
        user_id: int,
        post_type: PostType,
        audio_url: str,
        audio_key: str,
        duration: int,
        tags: Iterable[str],
        city: str,
        parent_id: int | None = None,
    ) -> Post:
        """Insert a new post or response and return the persisted ORM instance.

        Args:
            user_id: Owner of the post.
            post_type: ``POST`` or ``RESPONSE``; must agree with ``parent_id``.
            audio_url: Public URL of the uploaded audio.
            audio_key: Storage key of the uploaded audio.
            duration: Length in seconds, strictly positive.
            tags: Tag strings; duplicates collapse into one.
            city: Locale tag stored on the post.
            parent_id: Parent post for responses.
        """
        post = Post(
            user_id=user_id,
            type=post_type,
            parent_id=parent_id,
            audio_url=audio_url,
            audio_key=audio_key,
            duration=duration,
            city=city,
            response_count=0,
            bookmark_count=0,
            active=True,
            status=PostStatus.AWAITING_PROCESSING,
        )
        post.tag_rows = [PostTag(tag=tag) for tag in sorted(set(tags))]
        self.session.add(post)
        self.session.flush()
        return post

    def deactivate(self, post_id: int) -> bool:
        """Flip ``active`` to false if it is still true.

        Returns:
            True when this call performed the transition; False when the post
            was already inactive (or vanished), so callers never apply the
            side effects of a delete twice.
        """
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id, Post.active.is_(True))
            .values(active=False, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def set_waveform_url(self, post_id: int, waveform_url: str) -> bool:
        """Store the rendered waveform location for a post."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(waveform_url=waveform_url, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def set_status(self, post_id: int, status: PostStatus) -> bool:
        """Move a post to a new processing status."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
