"""Tests for resolving rule recipient roles into users."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from notification_engine.application.use_cases.notifications import RecipientResolver
from notification_engine.domain.entities import (
    DeliveryChannel,
    Notification,
    NotificationEvent,
    NotificationRule,
)
from notification_engine.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
)

NOW = datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


def _rule(*roles: str, **overrides) -> NotificationRule:
    values = {
        "id": 1,
        "category": "job",
        "event_type": "job_assigned",
        "priority": "high",
        "recipient_roles": list(roles),
        "channels": [DeliveryChannel.PUSH],
    }
    values.update(overrides)
    return NotificationRule(**values)


def _event(data=None, triggered_by=None) -> NotificationEvent:
    return NotificationEvent(
        type="job_assigned",
        category="job",
        priority="high",
        data=data or {},
        triggered_by=triggered_by,
    )


def test_role_tokens_resolve_to_active_users(session, make_user) -> None:
    first_manager = make_user("manager")
    make_user("manager", is_active=False)
    second_manager = make_user("manager")
    executive = make_user("executive")

    recipients = RecipientResolver(session).resolve(
        _event(), _rule("executive", "manager"), now=NOW
    )

    assert [recipient.id for recipient in recipients] == [
        executive,
        first_manager,
        second_manager,
    ]
    assert recipients[0].role == "executive"


def test_recipients_are_deduplicated_in_first_seen_order(session, make_user) -> None:
    manager = make_user("manager")
    technician = make_user("technician")

    recipients = RecipientResolver(session).resolve(
        _event({"assigned_technician_id": technician, "project_manager_id": manager}),
        _rule("technician", "manager", "project_manager", "assigned_technician"),
        now=NOW,
    )

    assert [recipient.id for recipient in recipients] == [technician, manager]


def test_supervisor_uses_reporting_line(session, make_user, make_employee) -> None:
    supervisor = make_user("supervisor")
    make_user("supervisor")
    technician = make_user("technician")
    make_employee(technician, reports_to=supervisor)

    recipients = RecipientResolver(session).resolve(
        _event({"assigned_technician_id": technician}), _rule("supervisor"), now=NOW
    )

    assert [recipient.id for recipient in recipients] == [supervisor]


def test_supervisor_without_technician_means_all_supervisors(session, make_user) -> None:
    first = make_user("supervisor")
    second = make_user("supervisor")

    recipients = RecipientResolver(session).resolve(_event(), _rule("supervisor"), now=NOW)

    assert [recipient.id for recipient in recipients] == [first, second]


def test_employee_and_department_tokens(
    session, make_user, make_employee, make_department
) -> None:
    manager = make_user("manager")
    worker = make_user("technician")
    department = make_department(manager_id=manager)
    employee = make_employee(worker, department_id=department)

    recipients = RecipientResolver(session).resolve(
        _event({"employee_id": employee, "department_id": department}),
        _rule("employee", "department_manager"),
        now=NOW,
    )

    assert [recipient.id for recipient in recipients] == [worker, manager]


def test_all_employees_skips_terminated(session, make_user, make_employee) -> None:
    current = make_user("technician")
    leaving = make_user("technician")
    gone = make_user("technician")
    make_employee(current)
    make_employee(leaving, termination_date=date.today() + timedelta(days=30))
    make_employee(gone, termination_date=date.today() - timedelta(days=1))

    recipients = RecipientResolver(session).resolve(_event(), _rule("all_employees"), now=NOW)

    assert [recipient.id for recipient in recipients] == [current, leaving]


def test_unknown_tokens_and_ids_are_ignored(session, make_user, caplog) -> None:
    client = make_user("client")
    deleted = make_user("client", deleted=True)

    with caplog.at_level("WARNING"):
        recipients = RecipientResolver(session).resolve(
            _event({"recipient_ids": [client, deleted, 999, "abc"]}),
            _rule("wizard", "explicit"),
            now=NOW,
        )

    assert [recipient.id for recipient in recipients] == [client]
    assert "wizard" in caplog.text


def test_explicit_ids_include_inactive_users(session, make_user) -> None:
    inactive = make_user("technician", is_active=False)

    recipients = RecipientResolver(session).resolve(
        _event({"recipient_ids": [inactive]}), _rule("explicit"), now=NOW
    )

    assert [recipient.id for recipient in recipients] == [inactive]


def test_exclude_actor_drops_the_triggering_user(session, make_user) -> None:
    actor = make_user("manager")
    other = make_user("manager")

    resolver = RecipientResolver(session)
    excluded = resolver.resolve(
        _event(triggered_by=str(actor)), _rule("manager", exclude_actor=True), now=NOW
    )
    included = resolver.resolve(
        _event(triggered_by=str(actor)), _rule("manager"), now=NOW
    )

    assert [recipient.id for recipient in excluded] == [other]
    assert [recipient.id for recipient in included] == [actor, other]


def test_dedupe_window_skips_recently_notified(session, make_user) -> None:
    notified = make_user("manager")
    fresh = make_user("manager")
    NotificationRepository(session).create(
        Notification(
            id=None,
            user_id=notified,
            category="job",
            event_type="job_assigned",
            title="New Job Assigned",
            message="Assigned",
            related_entity_id="12",
            created_at=NOW - timedelta(minutes=5),
        )
    )

    resolver = RecipientResolver(session)
    within = resolver.resolve(
        _event({"entity_id": 12}), _rule("manager", dedupe_window_seconds=600), now=NOW
    )
    other_entity = resolver.resolve(
        _event({"entity_id": 13}), _rule("manager", dedupe_window_seconds=600), now=NOW
    )
    expired = resolver.resolve(
        _event({"entity_id": 12}), _rule("manager", dedupe_window_seconds=60), now=NOW
    )

    assert [recipient.id for recipient in within] == [fresh]
    assert [recipient.id for recipient in other_entity] == [notified, fresh]
    assert [recipient.id for recipient in expired] == [notified, fresh]


def test_recipients_carry_stored_preferences(session, make_user) -> None:
    user = make_user("manager")
    repository = NotificationPreferenceRepository(session)
    repository.upsert(user, repository.get(user).merged_with({"real_time": False}))

    recipients = RecipientResolver(session).resolve(_event(), _rule("manager"), now=NOW)

    assert recipients[0].preferences.real_time is False
