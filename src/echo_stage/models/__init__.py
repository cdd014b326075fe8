# src/echo_stage/models/__init__.py
"""SQLAlchemy models for the Echo service."""

from .bookmark import Bookmark
from .notification import Notification
from .post import Post, PostStatus, PostTag, PostType
from .pulse import PulseStat
from .user import User, UserProfile

__all__ = [
    "Bookmark",
    "Notification",
    "Post", "PostStatus", "PostTag", "PostType",
    "PulseStat",
    "User", "UserProfile",
]
