"""Turn a business event into persisted, dispatched notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    SYSTEM_ACTOR,
    Notification,
    NotificationEvent,
)
from notification_engine.infrastructure.repositories import (
    NotificationRepository,
    NotificationRuleRepository,
)
from notification_engine.utils import ensure_app_timezone, now_in_app_timezone

from .conditions import evaluate, event_scope
from .content import generate_content
from .dispatcher import DeliveryDispatcher
from .ports import DeliveryQueue, RealtimeGateway
from .recipients import RecipientResolver

logger = logging.getLogger(__name__)

REASON_NO_RULE = "no_rule"
REASON_CONDITIONS_NOT_MET = "conditions_not_met"
REASON_NO_RECIPIENTS = "no_recipients"


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of a trigger: rows created, or why nothing was created."""

    created_count: int
    reason: str | None = None

    @property
    def created(self) -> bool:
        return self.created_count > 0


def _entity_id(data: dict[str, Any]) -> str | None:
    value = data.get("entity_id")
    return str(value) if value is not None else None


def _optional_text(value: Any) -> str | None:
    return str(value) if value is not None else None


def trigger_notification(
    session: Session,
    event: NotificationEvent,
    *,
    gateway: RealtimeGateway,
    queue: DeliveryQueue,
    now: datetime | None = None,
) -> TriggerResult:
    """Create one notification per resolved recipient and dispatch them.

    A missing or disabled rule, failing conditions and an empty recipient set
    are reported through :attr:`TriggerResult.reason`. Rows are inserted in a
    single transaction; a persistence error rolls back and propagates before
    any delivery starts. Delivery problems never propagate.
    """

    moment = ensure_app_timezone(now) or now_in_app_timezone()

    rule = NotificationRuleRepository(session).get_enabled_by_event_type(event.type)
    if rule is None:
        logger.debug("No enabled rule for event type %s", event.type)
        return TriggerResult(created_count=0, reason=REASON_NO_RULE)

    if rule.conditions is not None and not evaluate(rule.conditions, event_scope(event)):
        logger.debug("Conditions not met for event type %s", event.type)
        return TriggerResult(created_count=0, reason=REASON_CONDITIONS_NOT_MET)

    recipients = RecipientResolver(session).resolve(event, rule, now=moment)
    if not recipients:
        logger.info("No recipients resolved for event type %s", event.type)
        return TriggerResult(created_count=0, reason=REASON_NO_RECIPIENTS)

    data = event.data or {}
    content = generate_content(event.type, data)
    drafts = [
        Notification(
            id=None,
            user_id=recipient.id,
            category=event.category,
            event_type=event.type,
            title=content.title,
            message=content.message,
            short_message=content.short_message,
            priority=event.priority,
            read=False,
            related_entity_type=_optional_text(data.get("entity_type")),
            related_entity_id=_entity_id(data),
            related_entity_name=_optional_text(data.get("entity_name")),
            created_by=event.triggered_by or SYSTEM_ACTOR,
            action_url=content.action_url,
            additional_notes=_optional_text(data.get("notes")),
            created_at=moment,
        )
        for recipient in recipients
    ]

    created = NotificationRepository(session).create_many(drafts)
    logger.info(
        "Created %d notification(s) for event type %s", len(created), event.type
    )

    dispatcher = DeliveryDispatcher(session, gateway=gateway, queue=queue)
    dispatcher.dispatch(rule, zip(created, recipients), data=data, now=moment)

    return TriggerResult(created_count=len(created))


__all__ = [
    "REASON_CONDITIONS_NOT_MET",
    "REASON_NO_RECIPIENTS",
    "REASON_NO_RULE",
    "TriggerResult",
    "trigger_notification",
]
