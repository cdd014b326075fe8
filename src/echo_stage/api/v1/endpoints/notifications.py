# src/echo_stage/api/v1/endpoints/notifications.py
"""Notification inbox endpoints for the Echo API."""

from typing import Annotated

from fastapi import APIRouter, Query

from echo_stage.api.v1.dependencies import SessionDep, ViewerDep
from echo_stage.schemas.common import Success
from echo_stage.schemas.notification import NotificationPage, UnreadCount
from echo_stage.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
def list_my_notifications(
    db: SessionDep,
    ctx: ViewerDep,
    start_index: Annotated[int, Query(ge=0)] = 0,
    per_page: Annotated[int | None, Query()] = None,
) -> NotificationPage:
    return notifications.list_notifications(
        db,
        ctx.require_viewer(),
        start_index=start_index,
        per_page=per_page,
    )


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(db: SessionDep, ctx: ViewerDep) -> UnreadCount:
    return UnreadCount(count=notifications.unread_count(db, ctx.require_viewer()))


@router.post("/read-all", response_model=Success)
def read_all(db: SessionDep, ctx: ViewerDep) -> Success:
    notifications.mark_all_read(db, ctx.require_viewer())
    return Success()


@router.post("/{notification_id}/read", response_model=Success)
def read_one(notification_id: int, db: SessionDep, ctx: ViewerDep) -> Success:
    """Mark one notification read; 404 if it is not the caller's."""
    notifications.mark_read(db, ctx.require_viewer(), notification_id)
    return Success()
