"""Persistence helpers for notification entities."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from notification_engine.domain.entities import (
    Notification,
    NotificationFilters,
    PaginatedNotifications,
)
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        return self.create_many([notification])[0]

    def create_many(self, notifications: Sequence[Notification]) -> list[Notification]:
        """Insert ``notifications`` in a single transaction.

        Either every row is committed or none is: any failure rolls the
        session back and is re-raised to the caller.
        """

        if not notifications:
            return []
        models = []
        for notification in notifications:
            model = NotificationModel()
            self._apply_entity_to_model(model, notification)
            models.append(model)
        try:
            self.session.add_all(models)
            self.session.flush()
            created = [self._to_entity(model) for model in models]
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("Bulk insert of %d notification(s) failed", len(models))
            raise
        return created

    def list_for_user(
        self,
        user_id: int,
        *,
        page: int = 1,
        limit: int = 20,
        filters: NotificationFilters | None = None,
    ) -> PaginatedNotifications:
        page = max(page, 1)
        limit = max(limit, 1)
        query = self._apply_filters(self._visible_for_user(user_id), filters)
        total = query.count()
        models = (
            query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total_pages = math.ceil(total / limit) if total else 0
        return PaginatedNotifications(
            notifications=[self._to_entity(model) for model in models],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_more=page < total_pages,
        )

    def list_unread_for_user(
        self, user_id: int, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self._visible_for_user(user_id)
            .filter(NotificationModel.read.is_(False))
            .order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def get_for_user(self, notification_id: int, user_id: int) -> Notification | None:
        model = (
            self._visible_for_user(user_id)
            .filter(NotificationModel.id == notification_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def count_unread(self, user_id: int) -> int:
        return (
            self._visible_for_user(user_id)
            .filter(NotificationModel.read.is_(False))
            .count()
        )

    def count_for_user(self, user_id: int, *, since: datetime | None = None) -> int:
        query = self._visible_for_user(user_id)
        if since is not None:
            query = query.filter(
                NotificationModel.created_at >= ensure_app_naive_datetime(since)
            )
        return query.count()

    def count_grouped(self, user_id: int, column_name: str) -> dict[str, int]:
        """Return visible notification counts grouped by ``column_name``."""

        column = getattr(NotificationModel, column_name)
        rows = (
            self.session.query(column, func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.deleted_at.is_(None))
            .group_by(column)
            .all()
        )
        return {key: count for key, count in rows}

    def mark_as_read(self, notification_id: int, *, user_id: int) -> bool:
        """Mark one notification as read. Rows owned by other users are untouched."""

        updated = (
            self._visible_for_user(user_id)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.read.is_(False))
            .update(
                {
                    NotificationModel.read: True,
                    NotificationModel.read_at: now_in_app_naive_datetime(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self._visible_for_user(user_id)
            .filter(NotificationModel.read.is_(False))
            .update(
                {
                    NotificationModel.read: True,
                    NotificationModel.read_at: now_in_app_naive_datetime(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def soft_delete(self, notification_id: int, *, user_id: int) -> bool:
        updated = (
            self._visible_for_user(user_id)
            .filter(NotificationModel.id == notification_id)
            .update(
                {NotificationModel.deleted_at: now_in_app_naive_datetime()},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def soft_delete_older_than(self, cutoff: datetime) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.created_at <= ensure_app_naive_datetime(cutoff))
            .filter(NotificationModel.deleted_at.is_(None))
            .update(
                {NotificationModel.deleted_at: now_in_app_naive_datetime()},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def user_ids_notified_since(
        self,
        user_ids: Iterable[int],
        *,
        event_type: str,
        related_entity_id: str | None,
        since: datetime,
    ) -> set[int]:
        """Return which of ``user_ids`` already hold a matching notification."""

        ids = {user_id for user_id in user_ids if user_id is not None}
        if not ids:
            return set()
        query = (
            self.session.query(NotificationModel.user_id)
            .filter(NotificationModel.user_id.in_(ids))
            .filter(NotificationModel.event_type == event_type)
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .filter(NotificationModel.deleted_at.is_(None))
        )
        if related_entity_id is None:
            query = query.filter(NotificationModel.related_entity_id.is_(None))
        else:
            query = query.filter(NotificationModel.related_entity_id == related_entity_id)
        return {user_id for (user_id,) in query.distinct().all()}

    def _visible_for_user(self, user_id: int) -> Query:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.deleted_at.is_(None))
        )

    @staticmethod
    def _apply_filters(query: Query, filters: NotificationFilters | None) -> Query:
        if filters is None:
            return query
        if filters.category:
            query = query.filter(NotificationModel.category == filters.category)
        if filters.priority:
            query = query.filter(NotificationModel.priority == filters.priority)
        if filters.read is not None:
            query = query.filter(NotificationModel.read.is_(filters.read))
        if filters.event_type:
            query = query.filter(NotificationModel.event_type == filters.event_type)
        if filters.start_date is not None:
            query = query.filter(
                NotificationModel.created_at >= ensure_app_naive_datetime(filters.start_date)
            )
        if filters.end_date is not None:
            query = query.filter(
                NotificationModel.created_at <= ensure_app_naive_datetime(filters.end_date)
            )
        return query

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.user_id = notification.user_id
        model.category = notification.category
        model.event_type = notification.event_type
        model.title = notification.title
        model.message = notification.message
        model.short_message = notification.short_message
        model.priority = notification.priority
        model.read = notification.read
        model.read_at = ensure_app_naive_datetime(notification.read_at)
        model.related_entity_type = notification.related_entity_type
        model.related_entity_id = notification.related_entity_id
        model.related_entity_name = notification.related_entity_name
        model.created_by = notification.created_by
        model.action_url = notification.action_url
        model.additional_notes = notification.additional_notes
        model.created_at = (
            ensure_app_naive_datetime(notification.created_at)
            or now_in_app_naive_datetime()
        )
        model.deleted_at = ensure_app_naive_datetime(notification.deleted_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            category=model.category,
            event_type=model.event_type,
            title=model.title,
            message=model.message,
            short_message=model.short_message,
            priority=model.priority,
            read=bool(model.read),
            read_at=ensure_app_timezone(model.read_at),
            related_entity_type=model.related_entity_type,
            related_entity_id=model.related_entity_id,
            related_entity_name=model.related_entity_name,
            created_by=model.created_by,
            action_url=model.action_url,
            additional_notes=model.additional_notes,
            created_at=ensure_app_timezone(model.created_at),
            deleted_at=ensure_app_timezone(model.deleted_at),
        )


__all__ = ["NotificationRepository"]
