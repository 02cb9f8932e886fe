"""Route persisted notifications to their delivery channels."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_QUEUED,
    DELIVERY_STATUS_SENT,
    DELIVERY_STATUS_SKIPPED,
    PRIORITY_HIGH,
    DeliveryChannel,
    DeliveryJob,
    DeliveryLog,
    Notification,
    NotificationRule,
    Recipient,
)
from notification_engine.infrastructure.repositories import DeliveryLogRepository
from notification_engine.utils import (
    app_local_time,
    ensure_app_timezone,
    now_in_app_timezone,
)

from .ports import DeliveryQueue, RealtimeGateway

logger = logging.getLogger(__name__)

_QUEUED_CHANNELS = (DeliveryChannel.EMAIL, DeliveryChannel.SMS)


class DeliveryDispatcher:
    """Send each notification over the channels its recipient accepts.

    Every ``(notification, recipient)`` pair is handled on its own: a failure
    for one recipient is logged and does not affect the others, and nothing
    raised by a channel reaches the caller.
    """

    def __init__(
        self,
        session: Session,
        *,
        gateway: RealtimeGateway,
        queue: DeliveryQueue,
    ) -> None:
        self.session = session
        self.gateway = gateway
        self.queue = queue
        self.logs = DeliveryLogRepository(session)

    def dispatch(
        self,
        rule: NotificationRule,
        deliveries: Iterable[tuple[Notification, Recipient]],
        *,
        data: Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> None:
        moment = ensure_app_timezone(now) or now_in_app_timezone()
        for notification, recipient in deliveries:
            try:
                self._dispatch_one(rule, notification, recipient, data or {}, moment)
            except Exception:
                logger.exception(
                    "Failed to dispatch notification %s to user %s",
                    notification.id,
                    recipient.id,
                )

    def effective_channels(
        self,
        rule: NotificationRule,
        notification: Notification,
        recipient: Recipient,
        moment: datetime,
    ) -> tuple[list[DeliveryChannel], dict[DeliveryChannel, str]]:
        """Split the rule channels into allowed ones and skipped ones with a reason."""

        preferences = recipient.preferences
        category = preferences.for_category(notification.category)
        allowed: list[DeliveryChannel] = []
        skipped: dict[DeliveryChannel, str] = {}
        for channel in dict.fromkeys(rule.channels):
            if not category.allows(channel):
                skipped[channel] = f"{channel.value} disabled for {notification.category}"
            elif channel is DeliveryChannel.PUSH and not preferences.real_time:
                skipped[channel] = "real-time notifications disabled"
            elif (
                channel is DeliveryChannel.SMS
                and notification.priority != PRIORITY_HIGH
                and preferences.quiet_hours.contains(app_local_time(moment))
            ):
                skipped[channel] = "quiet hours"
            else:
                allowed.append(channel)
        return allowed, skipped

    def _dispatch_one(
        self,
        rule: NotificationRule,
        notification: Notification,
        recipient: Recipient,
        data: Mapping[str, Any],
        moment: datetime,
    ) -> None:
        allowed, skipped = self.effective_channels(rule, notification, recipient, moment)

        for channel, reason in skipped.items():
            self._record(notification, channel, DELIVERY_STATUS_SKIPPED, error=reason)

        if DeliveryChannel.PUSH in allowed:
            self._push(notification, recipient)

        queued = [channel for channel in allowed if channel in _QUEUED_CHANNELS]
        if queued:
            self._enqueue(notification, recipient, queued, data)

    def _push(self, notification: Notification, recipient: Recipient) -> None:
        try:
            self.gateway.send_notification_to_user(recipient.id, notification)
        except Exception as exc:
            logger.exception(
                "Realtime push of notification %s to user %s failed",
                notification.id,
                recipient.id,
            )
            self._record(
                notification, DeliveryChannel.PUSH, DELIVERY_STATUS_FAILED, error=str(exc)
            )
            return
        self._record(notification, DeliveryChannel.PUSH, DELIVERY_STATUS_SENT)

    def _enqueue(
        self,
        notification: Notification,
        recipient: Recipient,
        channels: list[DeliveryChannel],
        data: Mapping[str, Any],
    ) -> None:
        job = DeliveryJob(
            user_id=recipient.id,
            notification_id=notification.id,
            channels=channels,
            data=dict(data),
            priority=notification.priority,
        )
        try:
            job_id = self.queue.enqueue(job)
        except Exception as exc:
            logger.exception(
                "Failed to enqueue delivery of notification %s for user %s",
                notification.id,
                recipient.id,
            )
            for channel in channels:
                self._record(notification, channel, DELIVERY_STATUS_FAILED, error=str(exc))
            return

        logger.debug(
            "Queued %s delivery for notification %s (job %s)",
            ", ".join(channel.value for channel in channels),
            notification.id,
            job_id,
        )
        for channel in channels:
            self._record(
                notification,
                channel,
                DELIVERY_STATUS_QUEUED,
                provider_response=f"job:{job_id}" if job_id else None,
            )

    def _record(
        self,
        notification: Notification,
        channel: DeliveryChannel,
        status: str,
        *,
        provider_response: str | None = None,
        error: str | None = None,
    ) -> None:
        try:
            self.logs.append(
                DeliveryLog(
                    id=None,
                    notification_id=notification.id,
                    user_id=notification.user_id,
                    channel=channel.value,
                    status=status,
                    provider_response=provider_response,
                    error_message=error,
                )
            )
        except Exception:
            self.session.rollback()
            logger.exception(
                "Could not record %s %s log for notification %s",
                channel.value,
                status,
                notification.id,
            )


__all__ = ["DeliveryDispatcher"]
