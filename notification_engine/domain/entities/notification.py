"""Domain entities representing notification events and persisted notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DeliveryChannel(str, Enum):
    """Mechanisms a notification can be delivered through."""

    PUSH = "push"
    EMAIL = "email"
    SMS = "sms"


NOTIFICATION_CATEGORIES: tuple[str, ...] = (
    "job",
    "dispatch",
    "financial",
    "expense",
    "timesheet",
    "inventory",
    "fleet",
    "safety",
    "system",
)

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
NOTIFICATION_PRIORITIES: tuple[str, ...] = (PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)

SYSTEM_ACTOR = "System"


@dataclass
class NotificationEvent:
    """Business occurrence submitted to the engine.

    ``data`` is an open payload. Besides free-form values used by rule conditions
    it may carry entity references (``entity_type``, ``entity_id``,
    ``entity_name``), content overrides (``title``, ``message``,
    ``short_message``, ``action_url``), ``notes`` and recipient hints such as
    ``assigned_technician_id`` or ``recipient_ids``.
    """

    type: str
    category: str
    priority: str = PRIORITY_MEDIUM
    data: dict[str, Any] = field(default_factory=dict)
    triggered_by: str | None = None

    def envelope(self) -> dict[str, Any]:
        """Return the mapping rule conditions are evaluated against."""

        return {
            "type": self.type,
            "category": self.category,
            "priority": self.priority,
            "triggered_by": self.triggered_by,
            "data": self.data,
        }


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: int | None
    user_id: int
    category: str
    event_type: str
    title: str
    message: str
    short_message: str | None = None
    priority: str = PRIORITY_MEDIUM
    read: bool = False
    read_at: datetime | None = None
    related_entity_type: str | None = None
    related_entity_id: str | None = None
    related_entity_name: str | None = None
    created_by: str | None = None
    action_url: str | None = None
    additional_notes: str | None = None
    created_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass
class NotificationFilters:
    """Optional filters applied when listing a user's notifications."""

    category: str | None = None
    priority: str | None = None
    read: bool | None = None
    event_type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass
class PaginatedNotifications:
    """A page of notifications together with paging metadata."""

    notifications: list[Notification]
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool


__all__ = [
    "DeliveryChannel",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_MEDIUM",
    "PRIORITY_LOW",
    "SYSTEM_ACTOR",
    "NotificationEvent",
    "Notification",
    "NotificationFilters",
    "PaginatedNotifications",
]
