"""Tests for notification rule management."""

from __future__ import annotations

import pytest

from notification_engine.application.use_cases.notification_rules import (
    create_rule,
    default_rule_definitions,
    get_all_rules,
    seed_default_rules,
    update_rule,
)
from notification_engine.domain.entities import (
    Comparison,
    DeliveryChannel,
    InvalidConditionError,
)
from notification_engine.infrastructure.models import NotificationRuleModel
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def _create(session, **overrides):
    values = {
        "category": "job",
        "event_type": "job_completed",
        "priority": "medium",
        "recipient_roles": ["client", "project_manager"],
        "channels": ["email", "push", "email"],
    }
    values.update(overrides)
    return create_rule(session, **values)


def test_create_rule_normalises_configuration(session) -> None:
    rule = _create(session, conditions={"field": "data.amount", "op": "gt", "value": 0})

    stored = NotificationRuleRepository(session).get(rule.id)
    assert stored.channels == [DeliveryChannel.EMAIL, DeliveryChannel.PUSH]
    assert stored.recipient_roles == ["client", "project_manager"]
    assert stored.conditions == Comparison("data.amount", "gt", 0)
    assert stored.enabled is True
    assert stored.exclude_actor is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"category": "marketing"},
        {"priority": "critical"},
        {"channels": ["fax"]},
        {"event_type": "  "},
        {"recipient_roles": "manager"},
        {"dedupe_window_seconds": 0},
    ],
)
def test_create_rule_rejects_invalid_values(session, overrides) -> None:
    with pytest.raises(ValueError):
        _create(session, **overrides)


def test_create_rule_rejects_invalid_conditions(session) -> None:
    with pytest.raises(InvalidConditionError):
        _create(session, conditions={"field": "data.amount", "op": "approx", "value": 1})


def test_event_types_are_unique(session) -> None:
    _create(session)

    with pytest.raises(ValueError, match="already exists"):
        _create(session)


def test_update_rule_changes_only_given_fields(session) -> None:
    rule = _create(session, description="Job completed")

    updated = update_rule(session, rule.id, enabled=False, channels=["sms"])

    assert updated.enabled is False
    assert updated.channels == [DeliveryChannel.SMS]
    assert updated.description == "Job completed"
    assert updated.recipient_roles == ["client", "project_manager"]
    assert NotificationRuleRepository(session).get_enabled_by_event_type("job_completed") is None


def test_update_rule_validation(session) -> None:
    rule = _create(session)
    _create(session, event_type="job_cancelled")

    with pytest.raises(ValueError, match="not found"):
        update_rule(session, 999, enabled=False)
    with pytest.raises(ValueError, match="Unknown rule fields"):
        update_rule(session, rule.id, colour="red")
    with pytest.raises(ValueError, match="already exists"):
        update_rule(session, rule.id, event_type="job_cancelled")


def test_corrupt_stored_conditions_disable_the_rule(session, caplog) -> None:
    rule = _create(session)
    model = session.get(NotificationRuleModel, rule.id)
    model.conditions = {"field": "data.amount", "op": "nope"}
    session.commit()

    with caplog.at_level("ERROR"):
        loaded = NotificationRuleRepository(session).get(rule.id)

    assert loaded.enabled is False
    assert "job_completed" in caplog.text


def test_seed_default_rules_is_repeatable(session) -> None:
    _create(session, event_type="bid_won", priority="high")

    created = seed_default_rules(session)

    assert created == len(default_rule_definitions()) - 1
    assert seed_default_rules(session) == 0
    rules = {rule.event_type: rule for rule in get_all_rules(session)}
    assert rules["bid_won"].recipient_roles == ["client", "project_manager"]
    assert rules["job_cost_exceeds_budget"].conditions is not None
