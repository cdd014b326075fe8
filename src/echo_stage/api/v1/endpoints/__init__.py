# src/echo_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .bookmarks import router as bookmarks_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .pulse import router as pulse_router
from .users import router as users_router
from .worker import router as worker_router

__all__ = [
    "bookmarks_router",
    "notifications_router",
    "posts_router",
    "pulse_router",
    "users_router",
    "worker_router",
]
