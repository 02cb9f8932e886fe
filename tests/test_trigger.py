"""End-to-end tests for turning events into notifications."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notification_engine.application.use_cases.notification_rules import create_rule
from notification_engine.application.use_cases.notifications import (
    REASON_CONDITIONS_NOT_MET,
    REASON_NO_RECIPIENTS,
    REASON_NO_RULE,
    get_delivery_logs,
    trigger_notification,
)
from notification_engine.domain.entities import DeliveryChannel, NotificationEvent
from notification_engine.infrastructure.models import NotificationModel

NOW = datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


def _bid_won(**data) -> NotificationEvent:
    payload = {
        "entity_type": "Bid",
        "entity_id": 44,
        "entity_name": "Roof Repair",
        "amount": 5000,
    }
    payload.update(data)
    return NotificationEvent(
        type="bid_won", category="job", priority="high", data=payload, triggered_by="3"
    )


@pytest.fixture()
def bid_won_rule(session):
    return create_rule(
        session,
        category="job",
        event_type="bid_won",
        priority="high",
        recipient_roles=["manager"],
        channels=["push", "email"],
    )


def test_missing_rule_creates_nothing(session, gateway, queue) -> None:
    result = trigger_notification(
        session, _bid_won(), gateway=gateway, queue=queue, now=NOW
    )

    assert result.created is False
    assert result.reason == REASON_NO_RULE
    assert session.query(NotificationModel).count() == 0


def test_disabled_rule_counts_as_missing(session, gateway, queue, make_user) -> None:
    make_user("manager")
    create_rule(
        session,
        category="job",
        event_type="bid_won",
        priority="high",
        recipient_roles=["manager"],
        channels=["push"],
        enabled=False,
    )

    result = trigger_notification(
        session, _bid_won(), gateway=gateway, queue=queue, now=NOW
    )

    assert result.reason == REASON_NO_RULE


def test_fan_out_creates_one_notification_per_manager(
    session, gateway, queue, make_user, bid_won_rule
) -> None:
    first = make_user("manager", email="first@example.com")
    second = make_user("manager", email="second@example.com")

    result = trigger_notification(
        session, _bid_won(), gateway=gateway, queue=queue, now=NOW
    )

    assert result.created is True
    assert result.created_count == 2
    rows = session.query(NotificationModel).order_by(NotificationModel.id).all()
    assert [row.user_id for row in rows] == [first, second]
    assert rows[0].title == "Bid Won!"
    assert rows[0].related_entity_id == "44"
    assert rows[0].created_by == "3"
    assert rows[0].action_url == "/dashboard/bids/44"
    assert rows[0].read is False

    assert [user_id for user_id, _ in gateway.pushed] == [first, second]
    assert [job.user_id for job in queue.jobs] == [first, second]
    assert all(job.channels == [DeliveryChannel.EMAIL] for job in queue.jobs)
    assert queue.jobs[0].priority == "high"

    statuses = {(log.channel, log.status) for log in get_delivery_logs(session, rows[0].id)}
    assert statuses == {("push", "sent"), ("email", "queued")}


def test_conditions_gate_the_trigger(session, gateway, queue, make_user) -> None:
    make_user("manager")
    create_rule(
        session,
        category="job",
        event_type="bid_won",
        priority="high",
        recipient_roles=["manager"],
        channels=["push"],
        conditions={"field": "data.amount", "op": "gte", "value": 1000},
    )

    rejected = trigger_notification(
        session, _bid_won(amount=500), gateway=gateway, queue=queue, now=NOW
    )
    accepted = trigger_notification(
        session, _bid_won(amount=1000), gateway=gateway, queue=queue, now=NOW
    )

    assert rejected.reason == REASON_CONDITIONS_NOT_MET
    assert accepted.created_count == 1


def test_no_recipients_is_reported(session, gateway, queue, bid_won_rule) -> None:
    result = trigger_notification(
        session, _bid_won(), gateway=gateway, queue=queue, now=NOW
    )

    assert result.created_count == 0
    assert result.reason == REASON_NO_RECIPIENTS
    assert gateway.pushed == []
    assert queue.jobs == []


def test_triggering_twice_creates_new_rows(
    session, gateway, queue, make_user, bid_won_rule
) -> None:
    make_user("manager")
    make_user("manager")

    trigger_notification(session, _bid_won(), gateway=gateway, queue=queue, now=NOW)
    trigger_notification(session, _bid_won(), gateway=gateway, queue=queue, now=NOW)

    assert session.query(NotificationModel).count() == 4


def test_persistence_failure_rolls_back_and_skips_delivery(
    session, gateway, queue, make_user, bid_won_rule, monkeypatch
) -> None:
    make_user("manager")
    make_user("manager")

    def failing_flush(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(session, "flush", failing_flush)

    with pytest.raises(RuntimeError, match="database unavailable"):
        trigger_notification(session, _bid_won(), gateway=gateway, queue=queue, now=NOW)

    monkeypatch.undo()
    assert session.query(NotificationModel).count() == 0
    assert gateway.pushed == []
    assert queue.jobs == []


def test_one_failed_push_does_not_stop_other_recipients(
    session, gateway, queue, make_user, bid_won_rule
) -> None:
    broken = make_user("manager")
    healthy = make_user("manager")
    gateway.fail_for = {broken}

    result = trigger_notification(
        session, _bid_won(), gateway=gateway, queue=queue, now=NOW
    )

    assert result.created_count == 2
    assert [user_id for user_id, _ in gateway.pushed] == [healthy]
    assert [job.user_id for job in queue.jobs] == [broken, healthy]

    broken_row = (
        session.query(NotificationModel).filter(NotificationModel.user_id == broken).one()
    )
    statuses = {
        (log.channel, log.status) for log in get_delivery_logs(session, broken_row.id)
    }
    assert ("push", "failed") in statuses


def test_notes_and_system_actor(session, gateway, queue, make_user, bid_won_rule) -> None:
    make_user("manager")
    event = _bid_won(notes="Client signed today")
    event.triggered_by = None

    trigger_notification(session, event, gateway=gateway, queue=queue, now=NOW)

    row = session.query(NotificationModel).one()
    assert row.additional_notes == "Client signed today"
    assert row.created_by == "System"
