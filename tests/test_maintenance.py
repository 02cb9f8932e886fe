"""Tests for notification housekeeping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from notification_engine.application.use_cases.notifications import (
    clean_old_notifications,
    get_unread_count,
)
from notification_engine.domain.entities import Notification
from notification_engine.infrastructure.repositories import NotificationRepository

NOW = datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


def _aged(session, user_id: int, days: int) -> None:
    NotificationRepository(session).create(
        Notification(
            id=None,
            user_id=user_id,
            category="system",
            event_type="clock_reminder",
            title="Clock In/Out Reminder",
            message="Remember to clock out",
            created_at=NOW - timedelta(days=days),
        )
    )


def test_clean_old_notifications_removes_expired_rows(session, make_user) -> None:
    user_id = make_user()
    for days in (10, 91, 200):
        _aged(session, user_id, days)

    removed = clean_old_notifications(session, 90, now=NOW)

    assert removed == 2
    assert get_unread_count(session, user_id) == 1
    assert clean_old_notifications(session, 90, now=NOW) == 0


def test_negative_retention_is_rejected(session) -> None:
    with pytest.raises(ValueError):
        clean_old_notifications(session, -1, now=NOW)
