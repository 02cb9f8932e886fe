"""Use cases for reading and updating a user's notification inbox."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    Notification,
    NotificationFilters,
    PaginatedNotifications,
)
from notification_engine.infrastructure.repositories import NotificationRepository
from notification_engine.utils import now_in_app_timezone

from .ports import RealtimeGateway

logger = logging.getLogger(__name__)


@dataclass
class NotificationStats:
    """Summary of a user's visible notifications."""

    total_notifications: int
    unread_count: int
    by_category: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    recent_count: int = 0


def get_user_notifications(
    session: Session,
    user_id: int,
    *,
    page: int = 1,
    limit: int = 20,
    filters: NotificationFilters | None = None,
) -> PaginatedNotifications:
    """Return a page of the user's notifications, newest first."""

    repository = NotificationRepository(session)
    return repository.list_for_user(user_id, page=page, limit=limit, filters=filters)


def get_notification(
    session: Session, notification_id: int, user_id: int
) -> Notification | None:
    return NotificationRepository(session).get_for_user(notification_id, user_id)


def get_unread_count(session: Session, user_id: int) -> int:
    return NotificationRepository(session).count_unread(user_id)


def mark_as_read(
    session: Session,
    notification_id: int,
    user_id: int,
    *,
    gateway: RealtimeGateway,
) -> bool:
    """Mark a notification as read and push the new unread count.

    Marking an already read notification, or one owned by somebody else,
    changes nothing.
    """

    repository = NotificationRepository(session)
    changed = repository.mark_as_read(notification_id, user_id=user_id)
    _push_unread_count(gateway, user_id, repository.count_unread(user_id))
    return changed


def mark_all_as_read(
    session: Session, user_id: int, *, gateway: RealtimeGateway
) -> int:
    updated = NotificationRepository(session).mark_all_as_read(user_id)
    _push_unread_count(gateway, user_id, 0)
    return updated


def delete_notification(
    session: Session,
    notification_id: int,
    user_id: int,
    *,
    gateway: RealtimeGateway,
) -> bool:
    """Soft delete one of the user's notifications and broadcast the change."""

    repository = NotificationRepository(session)
    deleted = repository.soft_delete(notification_id, user_id=user_id)
    if not deleted:
        logger.debug(
            "Notification %s not deleted: missing or not owned by user %s",
            notification_id,
            user_id,
        )
        return False

    try:
        gateway.broadcast_notification_deleted(user_id, notification_id)
    except Exception:
        logger.exception(
            "Failed to broadcast deletion of notification %s", notification_id
        )
    _push_unread_count(gateway, user_id, repository.count_unread(user_id))
    return True


def get_notification_stats(
    session: Session, user_id: int, *, now: datetime | None = None
) -> NotificationStats:
    repository = NotificationRepository(session)
    since = (now or now_in_app_timezone()) - timedelta(hours=24)
    return NotificationStats(
        total_notifications=repository.count_for_user(user_id),
        unread_count=repository.count_unread(user_id),
        by_category=repository.count_grouped(user_id, "category"),
        by_priority=repository.count_grouped(user_id, "priority"),
        recent_count=repository.count_for_user(user_id, since=since),
    )


def _push_unread_count(gateway: RealtimeGateway, user_id: int, count: int) -> None:
    try:
        gateway.update_unread_count(user_id, count)
    except Exception:
        logger.exception("Failed to push unread count to user %s", user_id)


__all__ = [
    "NotificationStats",
    "delete_notification",
    "get_notification",
    "get_notification_stats",
    "get_unread_count",
    "get_user_notifications",
    "mark_all_as_read",
    "mark_as_read",
]
