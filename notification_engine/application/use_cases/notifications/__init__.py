"""Notification engine use cases: fan-out, dispatch and inbox management."""

from .conditions import evaluate, event_scope
from .content import NotificationContent, generate_content
from .delivery import DeliveryFailedError, DeliveryOutcome, deliver_notification
from .dispatcher import DeliveryDispatcher
from .inbox import (
    NotificationStats,
    delete_notification,
    get_notification,
    get_notification_stats,
    get_unread_count,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
)
from .maintenance import clean_old_notifications, get_delivery_logs
from .ports import DeliveryQueue, RealtimeGateway
from .recipients import RecipientResolver
from .trigger import (
    REASON_CONDITIONS_NOT_MET,
    REASON_NO_RECIPIENTS,
    REASON_NO_RULE,
    TriggerResult,
    trigger_notification,
)

__all__ = [
    "evaluate",
    "event_scope",
    "NotificationContent",
    "generate_content",
    "DeliveryFailedError",
    "DeliveryOutcome",
    "deliver_notification",
    "DeliveryDispatcher",
    "NotificationStats",
    "delete_notification",
    "get_notification",
    "get_notification_stats",
    "get_unread_count",
    "get_user_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "clean_old_notifications",
    "get_delivery_logs",
    "DeliveryQueue",
    "RealtimeGateway",
    "RecipientResolver",
    "REASON_CONDITIONS_NOT_MET",
    "REASON_NO_RECIPIENTS",
    "REASON_NO_RULE",
    "TriggerResult",
    "trigger_notification",
]
