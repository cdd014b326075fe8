"""Read-side projection of posts under the content lifecycle rules."""
from __future__ import annotations

from echo_stage.db.time import as_utc
from echo_stage.models.post import Post, PostStatus
from echo_stage.models.user import UserProfile
from echo_stage.schemas.post import AuthorOut, PostDetail, PostSummary


def is_media_withheld(post: Post) -> bool:
    """Return True when the post's audio and waveform must not be exposed."""
    return post.status == PostStatus.DELETED


def to_author_out(profile: UserProfile) -> AuthorOut:
    return AuthorOut(
        id=profile.id,
        user_id=profile.user_id,
        username=profile.username,
        city=profile.city,
    )


def to_post_summary(post: Post, author: UserProfile, *, is_bookmarked: bool) -> PostSummary:
    """Project a post for list views.

    A ``DELETED`` post keeps its status visible but loses its waveform URL.
    """
    withheld = is_media_withheld(post)
    return PostSummary(
        id=post.id,
        user_id=post.user_id,
        author=to_author_out(author),
        type=post.type,
        status=post.status,
        parent_id=post.parent_id,
        duration=post.duration,
        tags=post.tags,
        waveform_url=None if withheld else post.waveform_url,
        response_count=post.response_count,
        bookmark_count=post.bookmark_count,
        is_bookmarked=is_bookmarked,
        created_at=as_utc(post.created_at),
    )


def to_post_detail(post: Post, author: UserProfile, *, is_bookmarked: bool) -> PostDetail:
    """Project a post for the detail view, adding audio URL and city."""
    summary = to_post_summary(post, author, is_bookmarked=is_bookmarked)
    return PostDetail(
        **summary.model_dump(exclude={"author"}),
        author=summary.author,
        audio_url=None if is_media_withheld(post) else post.audio_url,
        city=post.city,
    )
