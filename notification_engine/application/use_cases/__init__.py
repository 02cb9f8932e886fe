"""Aggregate application use cases."""

from .notification_preferences import get_preferences, update_preferences
from .notification_rules import create_rule, get_all_rules, update_rule
from .notifications import (
    clean_old_notifications,
    delete_notification,
    get_delivery_logs,
    get_notification,
    get_notification_stats,
    get_unread_count,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
    trigger_notification,
)

__all__ = [
    "clean_old_notifications",
    "create_rule",
    "delete_notification",
    "get_all_rules",
    "get_delivery_logs",
    "get_notification",
    "get_notification_stats",
    "get_preferences",
    "get_unread_count",
    "get_user_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "trigger_notification",
    "update_preferences",
    "update_rule",
]
