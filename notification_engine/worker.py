"""Task executed by RQ workers for queued email and SMS deliveries."""

from __future__ import annotations

import logging
from typing import Any

from notification_engine.application.use_cases.notifications import (
    DeliveryFailedError,
    deliver_notification,
)
from notification_engine.domain.entities import DeliveryJob
from notification_engine.infrastructure.database import session_scope

logger = logging.getLogger(__name__)


def process_delivery_job(payload: dict[str, Any]) -> dict[str, list[str]]:
    """Deliver one queued job.

    Raises :class:`DeliveryFailedError` when every channel failed so RQ applies
    its retry policy; partial successes are not retried.
    """

    job = DeliveryJob.from_payload(payload)
    logger.info(
        "Processing delivery of notification %s to user %s",
        job.notification_id,
        job.user_id,
    )
    with session_scope() as session:
        outcome = deliver_notification(session, job)

    if outcome.all_failed:
        raise DeliveryFailedError(
            f"Delivery of notification {job.notification_id} failed on "
            f"{', '.join(channel.value for channel in outcome.failed)}"
        )
    return {
        "sent": [channel.value for channel in outcome.sent],
        "failed": [channel.value for channel in outcome.failed],
    }


__all__ = ["process_delivery_job"]
