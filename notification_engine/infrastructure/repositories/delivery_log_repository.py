"""Append-only persistence for notification delivery attempts."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import asc
from sqlalchemy.orm import Session

from notification_engine.domain.entities import DeliveryLog
from notification_engine.infrastructure.models import DeliveryLogModel
from notification_engine.utils import ensure_app_timezone


class DeliveryLogRepository:
    """Store one row per delivery attempt; rows are never updated."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, log: DeliveryLog) -> DeliveryLog:
        model = DeliveryLogModel(
            notification_id=log.notification_id,
            user_id=log.user_id,
            channel=log.channel,
            status=log.status,
            provider_response=log.provider_response,
            error_message=log.error_message,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_notification(self, notification_id: int) -> Sequence[DeliveryLog]:
        models = (
            self.session.query(DeliveryLogModel)
            .filter(DeliveryLogModel.notification_id == notification_id)
            .order_by(asc(DeliveryLogModel.created_at), asc(DeliveryLogModel.id))
            .all()
        )
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: DeliveryLogModel) -> DeliveryLog:
        return DeliveryLog(
            id=model.id,
            notification_id=model.notification_id,
            user_id=model.user_id,
            channel=model.channel,
            status=model.status,
            provider_response=model.provider_response,
            error_message=model.error_message,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DeliveryLogRepository"]
