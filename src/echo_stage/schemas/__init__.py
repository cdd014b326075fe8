# src/echo_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import Success
from .notification import NotificationOut, NotificationPage, UnreadCount
from .post import (
    AuthorOut,
    PostCreate,
    PostDetail,
    PostPage,
    PostSummary,
    ResponseCreate,
    StatusUpdate,
    WaveformUpdate,
)
from .pulse import PulseStats, PulseTagStat

__all__ = [
    "Success",
    "NotificationOut", "NotificationPage", "UnreadCount",
    "AuthorOut", "PostCreate", "PostDetail", "PostPage", "PostSummary",
    "ResponseCreate", "StatusUpdate", "WaveformUpdate",
    "PulseStats", "PulseTagStat",
]
