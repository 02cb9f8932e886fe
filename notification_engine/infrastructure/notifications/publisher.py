"""Realtime gateway pushing notification events to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from notification_engine.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

EVENT_NOTIFICATION = "notification"
EVENT_UNREAD_COUNT = "unread_count"
EVENT_NOTIFICATION_DELETED = "notification_deleted"


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "category": notification.category,
        "event_type": notification.event_type,
        "title": notification.title,
        "message": notification.message,
        "short_message": notification.short_message,
        "priority": notification.priority,
        "read": notification.read,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
        "related_entity_type": notification.related_entity_type,
        "related_entity_id": notification.related_entity_id,
        "related_entity_name": notification.related_entity_name,
        "created_by": notification.created_by,
        "action_url": notification.action_url,
        "additional_notes": notification.additional_notes,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


class RealtimeNotificationGateway:
    """Serialize realtime events and schedule their delivery without blocking."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[None]] = set()

    def send_notification_to_user(self, user_id: int, notification: Notification) -> None:
        self._schedule_send(
            user_id,
            {"type": EVENT_NOTIFICATION, "data": serialize_notification(notification)},
        )

    def update_unread_count(self, user_id: int, count: int) -> None:
        self._schedule_send(user_id, {"type": EVENT_UNREAD_COUNT, "data": {"count": count}})

    def broadcast_notification_deleted(self, user_id: int, notification_id: int) -> None:
        self._schedule_send(
            user_id,
            {"type": EVENT_NOTIFICATION_DELETED, "data": {"notification_id": notification_id}},
        )

    def _schedule_send(self, user_id: int, message: dict[str, Any]) -> None:
        if not self._manager.is_connected(user_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._manager.send_to_user(user_id, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return

        server_loop = self._manager.loop
        if server_loop is not None and server_loop.is_running():
            asyncio.run_coroutine_threadsafe(
                self._manager.send_to_user(user_id, message), server_loop
            )
            return

        try:
            from_thread.run(self._manager.send_to_user, user_id, message)
        except RuntimeError:
            logger.debug(
                "No event loop available; dropping %s event for user %s",
                message["type"],
                user_id,
            )


notification_gateway = RealtimeNotificationGateway(notification_manager)


__all__ = [
    "EVENT_NOTIFICATION",
    "EVENT_NOTIFICATION_DELETED",
    "EVENT_UNREAD_COUNT",
    "RealtimeNotificationGateway",
    "notification_gateway",
    "serialize_notification",
]
