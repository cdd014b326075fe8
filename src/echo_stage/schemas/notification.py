"""Schemas for the notification inbox."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: int
    user_id: int
    data: dict[str, Any]
    read: bool
    created_at: datetime


class NotificationPage(BaseModel):
    """One offset page of a user's notifications, newest first."""

    notifications: list[NotificationOut]
    start_index: int
    total: int


class UnreadCount(BaseModel):
    count: int
