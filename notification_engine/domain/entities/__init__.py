"""Domain entities exposed by the application."""

from .condition import (
    COMPARISON_OPERATORS,
    And,
    Comparison,
    ConditionNode,
    InvalidConditionError,
    Not,
    Or,
    condition_to_dict,
    parse_condition,
)
from .delivery import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DELIVERY_STATUS_SKIPPED,
    DeliveryJob,
    DeliveryLog,
    Recipient,
    SendResult,
)
from .notification import (
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    SYSTEM_ACTOR,
    DeliveryChannel,
    Notification,
    NotificationEvent,
    NotificationFilters,
    PaginatedNotifications,
)
from .notification_rule import NotificationRule
from .preferences import CategoryPreferences, QuietHours, UserPreferences

__all__ = [
    "COMPARISON_OPERATORS",
    "And",
    "Comparison",
    "ConditionNode",
    "InvalidConditionError",
    "Not",
    "Or",
    "condition_to_dict",
    "parse_condition",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_QUEUED",
    "DELIVERY_STATUS_SENT",
    "DELIVERY_STATUS_SKIPPED",
    "DeliveryJob",
    "DeliveryLog",
    "Recipient",
    "SendResult",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "SYSTEM_ACTOR",
    "DeliveryChannel",
    "Notification",
    "NotificationEvent",
    "NotificationFilters",
    "PaginatedNotifications",
    "NotificationRule",
    "CategoryPreferences",
    "QuietHours",
    "UserPreferences",
]
