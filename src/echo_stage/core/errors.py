"""Domain exceptions raised by the post/response core.

The core never translates these into transport codes; the HTTP layer does
(see ``echo_stage.api.v1.errors``).
"""

from __future__ import annotations


class EchoError(RuntimeError):
    """Base exception for all core failures."""


class NotFoundError(EchoError):
    """Raised when a referenced entity is absent or not visible."""


class PostNotFoundError(NotFoundError):
    """Raised when a post (or a response's parent) is absent or inactive."""

    def __init__(self, post_id: int, message: str = "Post not found") -> None:
        super().__init__(message)
        self.post_id = post_id


class BookmarkNotFoundError(NotFoundError):
    """Raised when removing a bookmark that does not exist."""

    def __init__(self, user_id: int, post_id: int) -> None:
        super().__init__("Bookmark not found")
        self.user_id = user_id
        self.post_id = post_id


class NotificationNotFoundError(NotFoundError):
    """Raised when a notification is missing or addressed to another user."""

    def __init__(self, notification_id: int) -> None:
        super().__init__("Notification not found")
        self.notification_id = notification_id


class NotAuthorizedError(EchoError):
    """Raised when the requester does not own the entity they try to modify."""


class ConflictError(EchoError):
    """Raised when a write collides with a uniqueness rule."""


class BookmarkConflictError(ConflictError):
    """Raised when the (user, post) bookmark pair already exists."""

    def __init__(self, user_id: int, post_id: int) -> None:
        super().__init__("Post is already bookmarked")
        self.user_id = user_id
        self.post_id = post_id


class InternalError(EchoError):
    """Raised on store failures or unexpected state."""
