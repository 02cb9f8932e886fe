"""Validation helpers for notification rule use cases."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from notification_engine.domain.entities import (
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    ConditionNode,
    DeliveryChannel,
    parse_condition,
)
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def normalize_event_type(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("event_type is required")
    return value.strip()


def ensure_category(value: Any) -> str:
    if value not in NOTIFICATION_CATEGORIES:
        raise ValueError(
            f"Unsupported category '{value}'. Allowed: {', '.join(NOTIFICATION_CATEGORIES)}"
        )
    return value


def ensure_priority(value: Any) -> str:
    if value not in NOTIFICATION_PRIORITIES:
        raise ValueError(
            f"Unsupported priority '{value}'. Allowed: {', '.join(NOTIFICATION_PRIORITIES)}"
        )
    return value


def parse_channels(values: Iterable[Any] | None) -> list[DeliveryChannel]:
    """Return the channels in ``values`` as enum members, without duplicates."""

    if values is None:
        return []
    if isinstance(values, (str, bytes)):
        raise ValueError("channels must be a list")
    channels: list[DeliveryChannel] = []
    for value in values:
        try:
            channel = DeliveryChannel(value)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in DeliveryChannel)
            raise ValueError(f"Unsupported channel '{value}'. Allowed: {allowed}") from exc
        if channel not in channels:
            channels.append(channel)
    return channels


def parse_recipient_roles(values: Iterable[Any] | None) -> list[str]:
    if values is None:
        return []
    if isinstance(values, (str, bytes)):
        raise ValueError("recipient_roles must be a list")
    roles: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("recipient_roles entries must be non-empty strings")
        role = value.strip()
        if role not in roles:
            roles.append(role)
    return roles


def parse_conditions(value: Any) -> ConditionNode | None:
    """Parse a condition tree, raising ``InvalidConditionError`` when malformed."""

    if value is None:
        return None
    return parse_condition(value)


def ensure_dedupe_window(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError("dedupe_window_seconds must be a positive integer")
    return value


def ensure_unique_event_type(
    event_type: str,
    repository: NotificationRuleRepository,
    *,
    exclude_rule_id: int | None = None,
) -> None:
    existing = repository.get_by_event_type(event_type)
    if existing is not None and existing.id != exclude_rule_id:
        raise ValueError(f"A rule for event type '{event_type}' already exists")
