"""Pydantic models describing notification websocket payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category: str
    event_type: str
    title: str
    message: str
    short_message: str | None = None
    priority: str
    read: bool = False
    read_at: datetime | None = None
    related_entity_type: str | None = None
    related_entity_id: str | None = None
    related_entity_name: str | None = None
    created_by: str | None = None
    action_url: str | None = None
    additional_notes: str | None = None
    created_at: datetime | None = None


class NotificationInit(BaseModel):
    """Snapshot sent when a websocket connection is established."""

    notifications: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = 0


class NotificationClientMessage(BaseModel):
    """Command sent by a connected client."""

    type: Literal[
        "ping",
        "mark_notification_read",
        "mark_all_notifications_read",
        "delete_notification",
    ]
    notification_id: int | None = Field(default=None, gt=0)


__all__ = ["NotificationClientMessage", "NotificationInit", "NotificationRead"]
