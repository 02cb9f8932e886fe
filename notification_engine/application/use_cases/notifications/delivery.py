"""Worker-side use case that performs queued email and SMS deliveries."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_SENT,
    DeliveryChannel,
    DeliveryJob,
    DeliveryLog,
    SendResult,
)
from notification_engine.infrastructure.email import send_notification_email
from notification_engine.infrastructure.repositories import (
    DeliveryLogRepository,
    NotificationRepository,
    UserRepository,
)
from notification_engine.infrastructure.sms import send_notification_sms

logger = logging.getLogger(__name__)

EmailSender = Callable[..., SendResult]
SmsSender = Callable[..., SendResult]


class DeliveryFailedError(RuntimeError):
    """Raised when every channel of a delivery job failed."""


@dataclass
class DeliveryOutcome:
    sent: list[DeliveryChannel] = field(default_factory=list)
    failed: list[DeliveryChannel] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return bool(self.failed) and not self.sent


def deliver_notification(
    session: Session,
    job: DeliveryJob,
    *,
    email_sender: EmailSender | None = None,
    sms_sender: SmsSender | None = None,
) -> DeliveryOutcome:
    """Send the email/SMS channels of ``job`` and record one log per attempt.

    The senders default to the SendGrid and Twilio helpers.
    """

    email_sender = email_sender or send_notification_email
    sms_sender = sms_sender or send_notification_sms

    outcome = DeliveryOutcome()
    logs = DeliveryLogRepository(session)

    notification = NotificationRepository(session).get_for_user(
        job.notification_id, job.user_id
    )
    if notification is None:
        logger.info(
            "Notification %s no longer available; dropping delivery job",
            job.notification_id,
        )
        return outcome

    recipients = UserRepository(session).get_recipients([job.user_id])
    recipient = recipients[0] if recipients else None

    for channel in job.channels:
        if channel is DeliveryChannel.EMAIL:
            if recipient is None or not recipient.email:
                result = SendResult(success=False, error="Recipient has no email address")
            else:
                result = email_sender(notification, recipient.email, recipient.full_name)
        elif channel is DeliveryChannel.SMS:
            if recipient is None or not recipient.phone:
                result = SendResult(success=False, error="Recipient has no phone number")
            else:
                result = sms_sender(notification, recipient.phone)
        else:
            logger.warning("Channel %s cannot be delivered by the worker", channel.value)
            continue

        logs.append(
            DeliveryLog(
                id=None,
                notification_id=notification.id,
                user_id=job.user_id,
                channel=channel.value,
                status=DELIVERY_STATUS_SENT if result.success else DELIVERY_STATUS_FAILED,
                provider_response=result.provider_response,
                error_message=result.error,
            )
        )
        if result.success:
            outcome.sent.append(channel)
        else:
            logger.warning(
                "%s delivery of notification %s to user %s failed: %s",
                channel.value,
                notification.id,
                job.user_id,
                result.error,
            )
            outcome.failed.append(channel)

    return outcome


__all__ = ["DeliveryFailedError", "DeliveryOutcome", "deliver_notification"]
