"""Use case for creating notification rules."""

from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.infrastructure.repositories import NotificationRuleRepository
from notification_engine.utils import now_in_app_timezone

from .validators import (
    ensure_category,
    ensure_dedupe_window,
    ensure_priority,
    ensure_unique_event_type,
    normalize_event_type,
    parse_channels,
    parse_conditions,
    parse_recipient_roles,
)


def create_rule(
    session: Session,
    *,
    category: str,
    event_type: str,
    priority: str,
    recipient_roles: list[str] | None = None,
    channels: list[Any] | None = None,
    description: str | None = None,
    enabled: bool = True,
    conditions: Any = None,
    exclude_actor: bool = False,
    dedupe_window_seconds: int | None = None,
) -> NotificationRule:
    """Create a notification rule after validating its configuration."""

    repository = NotificationRuleRepository(session)
    event_type = normalize_event_type(event_type)
    ensure_unique_event_type(event_type, repository)

    now = now_in_app_timezone()
    entity = NotificationRule(
        id=None,
        category=ensure_category(category),
        event_type=event_type,
        priority=ensure_priority(priority),
        description=description,
        enabled=bool(enabled),
        recipient_roles=parse_recipient_roles(recipient_roles),
        channels=parse_channels(channels),
        conditions=parse_conditions(conditions),
        exclude_actor=bool(exclude_actor),
        dedupe_window_seconds=ensure_dedupe_window(dedupe_window_seconds),
        created_at=now,
        updated_at=now,
    )
    return repository.create(entity)
