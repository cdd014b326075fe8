"""Repositories wrapping SQLAlchemy access to the entity store."""

from .bookmark_repo import BookmarkRepository
from .post_repo import PostRepository, select_posts_with_author
from .profile_repo import get_profile_by_user_id

__all__ = [
    "BookmarkRepository",
    "PostRepository",
    "get_profile_by_user_id",
    "select_posts_with_author",
]
