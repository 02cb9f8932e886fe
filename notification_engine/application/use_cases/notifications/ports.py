"""Contracts for the side-effecting collaborators of the notification engine."""

from __future__ import annotations

from typing import Protocol

from notification_engine.domain.entities import DeliveryJob, Notification


class RealtimeGateway(Protocol):
    """Pushes in-app updates to connected clients."""

    def send_notification_to_user(self, user_id: int, notification: Notification) -> None:
        ...

    def update_unread_count(self, user_id: int, count: int) -> None:
        ...

    def broadcast_notification_deleted(self, user_id: int, notification_id: int) -> None:
        ...


class DeliveryQueue(Protocol):
    """Accepts email/SMS delivery jobs for asynchronous processing."""

    def enqueue(self, job: DeliveryJob) -> str | None:
        ...


__all__ = ["DeliveryQueue", "RealtimeGateway"]
