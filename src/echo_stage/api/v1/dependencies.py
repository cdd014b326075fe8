"""Shared API dependencies for authentication and common functionality."""

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from echo_stage.core.context import RequestContext
from echo_stage.core.security import decode_access_token
from echo_stage.core.settings import settings
from echo_stage.db.session import get_db
from echo_stage.models import User

# HTTP Bearer schemes: one rejecting anonymous callers, one letting them through
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _authenticate(token: str, db: Session) -> int:
    """Resolve a bearer token to an enabled user's id.

    Raises:
        HTTPException: If the token is invalid or the user is unknown or disabled
    """
    try:
        user_id = decode_access_token(token)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    user = db.get(User, user_id)
    if user is None or user.disabled:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user.id


def get_request_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> RequestContext:
    """Build the request context, anonymous when no bearer token is sent."""
    if credentials is None:
        return RequestContext()
    return RequestContext(viewer_id=_authenticate(credentials.credentials, db))


def get_authenticated_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> RequestContext:
    """Build the request context for endpoints that need a signed-in viewer."""
    return RequestContext(viewer_id=_authenticate(credentials.credentials, db))


def require_worker_token(
    x_worker_token: Annotated[str | None, Header()] = None,
) -> None:
    """Reject calls that do not carry the processing worker's shared secret."""
    expected = settings.worker_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Worker access is disabled",
        )
    if x_worker_token is None or not secrets.compare_digest(x_worker_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid worker token",
        )


# Type aliases for context dependencies
ContextDep = Annotated[RequestContext, Depends(get_request_context)]
ViewerDep = Annotated[RequestContext, Depends(get_authenticated_context)]
WorkerDep = Depends(require_worker_token)
