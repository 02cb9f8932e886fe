"""Tests for the notification inbox use cases."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from notification_engine.application.use_cases.notifications import (
    delete_notification,
    get_notification,
    get_notification_stats,
    get_unread_count,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
)
from notification_engine.domain.entities import Notification, NotificationFilters
from notification_engine.infrastructure.repositories import NotificationRepository

NOW = datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


def _create(session, user_id: int, **overrides) -> Notification:
    values = {
        "id": None,
        "user_id": user_id,
        "category": "job",
        "event_type": "job_assigned",
        "title": "New Job Assigned",
        "message": "You have a new job",
        "created_at": NOW,
    }
    values.update(overrides)
    return NotificationRepository(session).create(Notification(**values))


def test_mark_as_read_is_idempotent(session, gateway, make_user) -> None:
    user_id = make_user()
    notification = _create(session, user_id)
    _create(session, user_id)

    first = mark_as_read(session, notification.id, user_id, gateway=gateway)
    second = mark_as_read(session, notification.id, user_id, gateway=gateway)

    stored = get_notification(session, notification.id, user_id)
    assert first is True
    assert second is False
    assert stored.read is True
    assert stored.read_at is not None
    assert gateway.counts == [(user_id, 1), (user_id, 1)]


def test_mark_as_read_ignores_other_users(session, gateway, make_user) -> None:
    owner = make_user()
    intruder = make_user()
    notification = _create(session, owner)

    changed = mark_as_read(session, notification.id, intruder, gateway=gateway)

    assert changed is False
    assert get_notification(session, notification.id, owner).read is False
    assert get_unread_count(session, owner) == 1


def test_mark_all_as_read(session, gateway, make_user) -> None:
    user_id = make_user()
    other = make_user()
    for _ in range(3):
        _create(session, user_id)
    _create(session, other)

    updated = mark_all_as_read(session, user_id, gateway=gateway)

    assert updated == 3
    assert get_unread_count(session, user_id) == 0
    assert get_unread_count(session, other) == 1
    assert gateway.counts == [(user_id, 0)]


def test_delete_notification_broadcasts(session, gateway, make_user) -> None:
    user_id = make_user()
    notification = _create(session, user_id)
    _create(session, user_id)

    deleted = delete_notification(session, notification.id, user_id, gateway=gateway)
    again = delete_notification(session, notification.id, user_id, gateway=gateway)

    assert deleted is True
    assert again is False
    assert get_notification(session, notification.id, user_id) is None
    assert gateway.deleted == [(user_id, notification.id)]
    assert gateway.counts == [(user_id, 1)]


def test_delete_notification_ignores_other_users(session, gateway, make_user) -> None:
    owner = make_user()
    intruder = make_user()
    notification = _create(session, owner)

    deleted = delete_notification(session, notification.id, intruder, gateway=gateway)

    assert deleted is False
    assert get_notification(session, notification.id, owner) is not None
    assert get_unread_count(session, owner) == 1
    assert gateway.deleted == []


def test_gateway_errors_do_not_break_inbox_updates(session, make_user) -> None:
    class BrokenGateway:
        def update_unread_count(self, user_id, count):
            raise RuntimeError("socket closed")

    user_id = make_user()
    notification = _create(session, user_id)

    assert mark_as_read(session, notification.id, user_id, gateway=BrokenGateway()) is True


def test_listing_is_paginated_and_filtered(session, make_user) -> None:
    user_id = make_user()
    for index in range(5):
        _create(
            session,
            user_id,
            category="financial" if index % 2 else "job",
            created_at=NOW - timedelta(minutes=index),
        )

    page = get_user_notifications(session, user_id, page=2, limit=2)
    financial = get_user_notifications(
        session, user_id, filters=NotificationFilters(category="financial")
    )

    assert page.total == 5
    assert page.total_pages == 3
    assert page.has_more is True
    assert len(page.notifications) == 2
    assert financial.total == 2
    assert all(item.category == "financial" for item in financial.notifications)


def test_notification_stats(session, gateway, make_user) -> None:
    user_id = make_user()
    first = _create(session, user_id, priority="high")
    _create(session, user_id, category="financial")
    _create(session, user_id, created_at=NOW - timedelta(days=3))
    mark_as_read(session, first.id, user_id, gateway=gateway)

    stats = get_notification_stats(session, user_id, now=NOW)

    assert stats.total_notifications == 3
    assert stats.unread_count == 2
    assert stats.by_category == {"job": 2, "financial": 1}
    assert stats.by_priority == {"high": 1, "medium": 2}
    assert stats.recent_count == 2
