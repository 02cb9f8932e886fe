"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    RealtimeNotificationGateway,
    notification_gateway,
    serialize_notification,
)

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "RealtimeNotificationGateway",
    "notification_gateway",
    "serialize_notification",
]
