"""Use case for updating notification rules."""

from dataclasses import replace
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

_UPDATABLE_FIELDS = frozenset(
    {
        "category",
        "event_type",
        "priority",
        "recipient_roles",
        "channels",
        "description",
        "enabled",
        "conditions",
        "exclude_actor",
        "dedupe_window_seconds",
    }
)


def update_rule(session: Session, rule_id: int, **changes: Any) -> NotificationRule:
    """Apply ``changes`` to a rule. Only the keys present are modified."""

    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown rule fields: {', '.join(sorted(unknown))}")

    repository = NotificationRuleRepository(session)
    current = repository.get(rule_id)
    if current is None:
        raise ValueError(f"Rule with id {rule_id} not found")

    updates: dict[str, Any] = {}
    if "event_type" in changes:
        event_type = normalize_event_type(changes["event_type"])
        ensure_unique_event_type(event_type, repository, exclude_rule_id=rule_id)
        updates["event_type"] = event_type
    if "category" in changes:
        updates["category"] = ensure_category(changes["category"])
    if "priority" in changes:
        updates["priority"] = ensure_priority(changes["priority"])
    if "recipient_roles" in changes:
        updates["recipient_roles"] = parse_recipient_roles(changes["recipient_roles"])
    if "channels" in changes:
        updates["channels"] = parse_channels(changes["channels"])
    if "conditions" in changes:
        updates["conditions"] = parse_conditions(changes["conditions"])
    if "dedupe_window_seconds" in changes:
        updates["dedupe_window_seconds"] = ensure_dedupe_window(
            changes["dedupe_window_seconds"]
        )
    for flag in ("enabled", "exclude_actor"):
        if flag in changes:
            updates[flag] = bool(changes[flag])
    if "description" in changes:
        updates["description"] = changes["description"]

    updated_rule = replace(current, **updates, updated_at=now_in_app_timezone())
    return repository.update(updated_rule)
