"""Per-request context passed explicitly into the core."""

from __future__ import annotations

from dataclasses import dataclass

from echo_stage.core.errors import NotAuthorizedError


@dataclass(frozen=True)
class RequestContext:
    """Resolved caller identity for a single request.

    ``viewer_id`` is ``None`` for anonymous callers.
    """

    viewer_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.viewer_id is not None

    def require_viewer(self) -> int:
        """Return the viewer id or raise when the caller is anonymous."""
        if self.viewer_id is None:
            raise NotAuthorizedError("Authentication required")
        return self.viewer_id
