# src/echo_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    bookmarks_router,
    notifications_router,
    posts_router,
    pulse_router,
    users_router,
    worker_router,
)

__all__ = [
    "bookmarks_router",
    "notifications_router",
    "posts_router",
    "pulse_router",
    "users_router",
    "worker_router",
]
