"""Repository implementations for infrastructure layer."""

from .delivery_log_repository import DeliveryLogRepository
from .notification_preference_repository import NotificationPreferenceRepository
from .notification_repository import NotificationRepository
from .notification_rule_repository import NotificationRuleRepository
from .user_repository import UserRepository

__all__ = [
    "DeliveryLogRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "NotificationRuleRepository",
    "UserRepository",
]
