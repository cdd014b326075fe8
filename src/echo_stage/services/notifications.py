"""Notification sink used by the response transaction, and the recipient's inbox."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Protocol

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from echo_stage.core.errors import NotificationNotFoundError
from echo_stage.db.time import as_utc
from echo_stage.db.transaction import transaction
from echo_stage.models.notification import Notification
from echo_stage.schemas.notification import NotificationOut, NotificationPage
from echo_stage.services.pagination import clamp_limit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseNotification:
    """Payload announcing that someone responded to a post."""

    postId: int  # noqa: N815
    responseId: int  # noqa: N815
    responderId: int  # noqa: N815
    type: str = field(default="RESPONSE")

    def to_payload(self) -> dict[str, object]:
        payload = asdict(self)
        return {"type": payload.pop("type"), **payload}


class NotificationSink(Protocol):
    def enqueue(self, recipient_id: int, event: ResponseNotification) -> None: ...


class DatabaseNotificationSink:
    """Queue notifications as rows in the caller's session.

    Rows share the caller's transaction, so a rolled back response leaves no
    notification behind.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def enqueue(self, recipient_id: int, event: ResponseNotification) -> None:
        self.session.add(Notification(user_id=recipient_id, data=event.to_payload()))
        self.session.flush()
        logger.debug("Queued %s notification for user %s", event.type, recipient_id)


def to_notification_out(notification: Notification) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        user_id=notification.user_id,
        data=notification.data,
        read=notification.read,
        created_at=as_utc(notification.created_at),
    )


def list_notifications(
    session: Session,
    user_id: int,
    *,
    start_index: int = 0,
    per_page: int | None = None,
) -> NotificationPage:
    """Return one page of ``user_id``'s notifications, newest first."""
    start_index = max(start_index, 0)
    total = session.scalar(
        select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    )
    rows = session.scalars(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(start_index)
        .limit(clamp_limit(per_page))
        .execution_options(populate_existing=True)
    ).all()
    return NotificationPage(
        notifications=[to_notification_out(row) for row in rows],
        start_index=start_index,
        total=total or 0,
    )


def unread_count(session: Session, user_id: int) -> int:
    count = session.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return count or 0


def mark_read(session: Session, user_id: int, notification_id: int) -> None:
    """Mark one of ``user_id``'s notifications as read.

    Raises:
        NotificationNotFoundError: If the row is missing or addressed to
            another user.
    """
    with transaction(session):
        result = session.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotificationNotFoundError(notification_id)
    logger.info("User %s read notification %s", user_id, notification_id)


def mark_all_read(session: Session, user_id: int) -> int:
    """Mark every unread notification of ``user_id`` as read; return how many."""
    with transaction(session):
        result = session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
    logger.info("User %s marked %s notifications as read", user_id, result.rowcount)
    return result.rowcount
