"""Read access to user profiles owned by the identity service."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from echo_stage.models.user import UserProfile


def get_profile_by_user_id(session: Session, user_id: int) -> UserProfile | None:
    """Return the profile for ``user_id``, or None if the user has none yet."""
    result = session.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    return result.scalars().first()
