"""Domain entity representing a notification rule."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .condition import ConditionNode
from .notification import DeliveryChannel


@dataclass
class NotificationRule:
    """Configuration binding an event type to recipients and channels."""

    id: int | None
    category: str
    event_type: str
    priority: str
    description: str | None = None
    enabled: bool = True
    recipient_roles: list[str] = field(default_factory=list)
    channels: list[DeliveryChannel] = field(default_factory=list)
    conditions: ConditionNode | None = None
    exclude_actor: bool = False
    dedupe_window_seconds: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["NotificationRule"]
