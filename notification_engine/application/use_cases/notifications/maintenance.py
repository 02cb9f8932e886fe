"""Housekeeping use cases for stored notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from notification_engine.domain.entities import DeliveryLog
from notification_engine.infrastructure.repositories import (
    DeliveryLogRepository,
    NotificationRepository,
)
from notification_engine.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

DEFAULT_DAYS_TO_KEEP = 90


def clean_old_notifications(
    session: Session,
    days_to_keep: int = DEFAULT_DAYS_TO_KEEP,
    *,
    now: datetime | None = None,
) -> int:
    """Soft delete notifications older than ``days_to_keep`` days.

    Returns the number of notifications removed from the inboxes.
    """

    if days_to_keep < 0:
        raise ValueError("days_to_keep must be zero or positive")
    cutoff = (now or now_in_app_timezone()) - timedelta(days=days_to_keep)
    removed = NotificationRepository(session).soft_delete_older_than(cutoff)
    logger.info(
        "Removed %d notification(s) created before %s", removed, cutoff.isoformat()
    )
    return removed


def get_delivery_logs(session: Session, notification_id: int) -> Sequence[DeliveryLog]:
    return DeliveryLogRepository(session).list_for_notification(notification_id)


__all__ = ["DEFAULT_DAYS_TO_KEEP", "clean_old_notifications", "get_delivery_logs"]
