"""Domain entities used while delivering notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .notification import PRIORITY_MEDIUM, DeliveryChannel
from .preferences import UserPreferences

DELIVERY_STATUS_QUEUED = "queued"
DELIVERY_STATUS_SENT = "sent"
DELIVERY_STATUS_FAILED = "failed"
DELIVERY_STATUS_SKIPPED = "skipped"


@dataclass
class Recipient:
    """User resolved as a target for one trigger."""

    id: int
    email: str | None = None
    phone: str | None = None
    full_name: str | None = None
    role: str | None = None
    preferences: UserPreferences = field(default_factory=UserPreferences)


@dataclass
class DeliveryLog:
    """Append-only record of one delivery attempt for a notification channel."""

    id: int | None
    notification_id: int | None
    user_id: int
    channel: str
    status: str
    provider_response: str | None = None
    error_message: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of handing one message to an email or SMS provider."""

    success: bool
    provider_response: str | None = None
    error: str | None = None


@dataclass
class DeliveryJob:
    """Asynchronous email/SMS delivery request handed to the queue."""

    user_id: int
    notification_id: int
    channels: list[DeliveryChannel]
    data: dict[str, Any] = field(default_factory=dict)
    priority: str = PRIORITY_MEDIUM

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable payload for the queue backend."""

        return {
            "user_id": self.user_id,
            "notification_id": self.notification_id,
            "channels": [channel.value for channel in self.channels],
            "data": self.data,
            "priority": self.priority,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "DeliveryJob":
        return cls(
            user_id=int(payload["user_id"]),
            notification_id=int(payload["notification_id"]),
            channels=[DeliveryChannel(value) for value in payload.get("channels", [])],
            data=dict(payload.get("data") or {}),
            priority=payload.get("priority") or PRIORITY_MEDIUM,
        )


__all__ = [
    "DELIVERY_STATUS_QUEUED",
    "DELIVERY_STATUS_SENT",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_SKIPPED",
    "DeliveryJob",
    "DeliveryLog",
    "Recipient",
    "SendResult",
]
