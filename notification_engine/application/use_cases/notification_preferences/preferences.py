"""Use cases for per-user notification preferences."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import UserPreferences
from notification_engine.infrastructure.repositories import NotificationPreferenceRepository

logger = logging.getLogger(__name__)


def get_preferences(session: Session, user_id: int) -> UserPreferences:
    """Return the stored preferences of ``user_id`` or the defaults."""

    return NotificationPreferenceRepository(session).get(user_id)


def update_preferences(
    session: Session, user_id: int, partial: Mapping[str, Any]
) -> UserPreferences:
    """Merge ``partial`` into the stored preferences and persist the result.

    Raises ``ValueError`` for unknown categories or malformed quiet hours.
    """

    if not isinstance(partial, Mapping):
        raise ValueError("Preferences update must be an object")
    repository = NotificationPreferenceRepository(session)
    merged = repository.get(user_id).merged_with(partial)
    saved = repository.upsert(user_id, merged)
    logger.info("Updated notification preferences for user %s", user_id)
    return saved
