"""Persistence helpers for notification preferences."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from notification_engine.domain.entities import UserPreferences
from notification_engine.infrastructure.models import NotificationPreferenceModel

logger = logging.getLogger(__name__)


class NotificationPreferenceRepository:
    """Read and store :class:`UserPreferences` documents."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> UserPreferences:
        """Return the stored preferences for ``user_id`` or the defaults."""

        model = self._get_model(user_id)
        return self._to_entity(model)

    def get_map_for_users(self, user_ids: Iterable[int]) -> dict[int, UserPreferences]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        models = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id.in_(ids))
            .all()
        )
        stored = {model.user_id: self._to_entity(model) for model in models}
        return {user_id: stored.get(user_id) or UserPreferences() for user_id in ids}

    def upsert(self, user_id: int, preferences: UserPreferences) -> UserPreferences:
        model = self._get_model(user_id)
        if model is None:
            model = NotificationPreferenceModel(user_id=user_id)
            self.session.add(model)
        model.preferences = preferences.to_dict()
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _get_model(self, user_id: int) -> NotificationPreferenceModel | None:
        return (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel | None) -> UserPreferences:
        if model is None:
            return UserPreferences()
        try:
            return UserPreferences.from_dict(model.preferences)
        except ValueError:
            logger.warning(
                "Stored preferences for user %s are invalid; using defaults",
                model.user_id,
            )
            return UserPreferences()


__all__ = ["NotificationPreferenceRepository"]
