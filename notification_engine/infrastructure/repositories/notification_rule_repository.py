"""Persistence layer for notification rules."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import asc
from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    DeliveryChannel,
    InvalidConditionError,
    NotificationRule,
    condition_to_dict,
    parse_condition,
)
from notification_engine.infrastructure.models import NotificationRuleModel
from notification_engine.utils import ensure_app_timezone

logger = logging.getLogger(__name__)


class NotificationRuleRepository:
    """Provide CRUD operations for :class:`NotificationRule` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self, *, enabled_only: bool = False) -> Sequence[NotificationRule]:
        query = self.session.query(NotificationRuleModel)
        if enabled_only:
            query = query.filter(NotificationRuleModel.enabled.is_(True))
        query = query.order_by(
            asc(NotificationRuleModel.category), asc(NotificationRuleModel.event_type)
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, rule_id: int) -> NotificationRule | None:
        model = self.session.get(NotificationRuleModel, rule_id)
        return self._to_entity(model) if model else None

    def get_by_event_type(self, event_type: str) -> NotificationRule | None:
        model = (
            self.session.query(NotificationRuleModel)
            .filter(NotificationRuleModel.event_type == event_type)
            .first()
        )
        return self._to_entity(model) if model else None

    def get_enabled_by_event_type(self, event_type: str) -> NotificationRule | None:
        rule = self.get_by_event_type(event_type)
        if rule is None or not rule.enabled:
            return None
        return rule

    def create(self, rule: NotificationRule) -> NotificationRule:
        model = NotificationRuleModel()
        self._apply_entity_to_model(model, rule)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, rule: NotificationRule) -> NotificationRule:
        if rule.id is None:
            raise ValueError("Rule ID is required for update")

        model = self.session.get(NotificationRuleModel, rule.id)
        if not model:
            raise ValueError(f"Rule with id {rule.id} not found")

        self._apply_entity_to_model(model, rule)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationRuleModel, rule: NotificationRule
    ) -> None:
        model.category = rule.category
        model.event_type = rule.event_type
        model.description = rule.description
        model.enabled = rule.enabled
        model.priority = rule.priority
        model.recipient_roles = list(rule.recipient_roles)
        model.channels = [DeliveryChannel(channel).value for channel in rule.channels]
        model.conditions = (
            condition_to_dict(rule.conditions) if rule.conditions is not None else None
        )
        model.exclude_actor = bool(rule.exclude_actor)
        model.dedupe_window_seconds = rule.dedupe_window_seconds

    @staticmethod
    def _to_entity(model: NotificationRuleModel) -> NotificationRule:
        channels: list[DeliveryChannel] = []
        for value in model.channels or []:
            try:
                channels.append(DeliveryChannel(value))
            except ValueError:
                logger.warning(
                    "Ignoring unknown channel %r on rule %s", value, model.event_type
                )

        enabled = bool(model.enabled)
        conditions = None
        if model.conditions:
            try:
                conditions = parse_condition(model.conditions)
            except InvalidConditionError:
                # An unparseable stored tree must not match every event.
                logger.error(
                    "Stored conditions for rule %s are invalid; rule treated as disabled",
                    model.event_type,
                )
                enabled = False

        return NotificationRule(
            id=model.id,
            category=model.category,
            event_type=model.event_type,
            priority=model.priority,
            description=model.description,
            enabled=enabled,
            recipient_roles=list(model.recipient_roles or []),
            channels=channels,
            conditions=conditions,
            exclude_actor=bool(model.exclude_actor),
            dedupe_window_seconds=model.dedupe_window_seconds,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRuleRepository"]
