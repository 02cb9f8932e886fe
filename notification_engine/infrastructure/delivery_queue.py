"""Redis Queue backed delivery queue for email and SMS jobs."""

from __future__ import annotations

import logging
from typing import Any

from redis import Redis
from rq import Queue, Retry

from notification_engine.config import get_settings
from notification_engine.domain.entities import PRIORITY_HIGH, DeliveryJob

logger = logging.getLogger(__name__)

DELIVERY_TASK = "notification_engine.worker.process_delivery_job"
JOB_TIMEOUT = "5m"
RESULT_TTL = 86400
_BASE_RETRY_INTERVAL = 30


def retry_intervals(max_retries: int) -> list[int]:
    """Exponential back-off delays in seconds for ``max_retries`` attempts."""

    return [_BASE_RETRY_INTERVAL * 2**attempt for attempt in range(max_retries)]


def delivery_job_id(notification_id: int) -> str:
    return f"notification-{notification_id}"


class RQDeliveryQueue:
    """Enqueue :class:`DeliveryJob` payloads on an RQ queue.

    The Redis connection is opened lazily on first use. High priority jobs are
    placed at the front of the queue.
    """

    def __init__(
        self,
        *,
        redis_url: str | None = None,
        queue_name: str | None = None,
        max_retries: int | None = None,
        connection: Redis | None = None,
    ) -> None:
        settings = get_settings()
        self.redis_url = redis_url or settings.redis_url
        self.queue_name = queue_name or settings.notification_queue_name
        self.max_retries = (
            settings.delivery_max_retries if max_retries is None else max_retries
        )
        self._connection = connection
        self._queue: Queue | None = None

    @property
    def queue(self) -> Queue:
        if self._queue is None:
            if self._connection is None:
                self._connection = Redis.from_url(self.redis_url)
            self._queue = Queue(self.queue_name, connection=self._connection)
            logger.info("Delivery queue %s connected to Redis", self.queue_name)
        return self._queue

    def enqueue(self, job: DeliveryJob) -> str:
        retry = None
        if self.max_retries:
            retry = Retry(max=self.max_retries, interval=retry_intervals(self.max_retries))
        rq_job = self.queue.enqueue(
            DELIVERY_TASK,
            job.to_payload(),
            job_id=delivery_job_id(job.notification_id),
            job_timeout=JOB_TIMEOUT,
            result_ttl=RESULT_TTL,
            retry=retry,
            at_front=job.priority == PRIORITY_HIGH,
        )
        logger.info(
            "Queued delivery job %s for notification %s", rq_job.id, job.notification_id
        )
        return rq_job.id

    def get_stats(self) -> dict[str, Any]:
        queue = self.queue
        return {
            "queue": self.queue_name,
            "waiting": queue.count,
            "active": queue.started_job_registry.count,
            "completed": queue.finished_job_registry.count,
            "failed": queue.failed_job_registry.count,
            "delayed": queue.scheduled_job_registry.count,
        }

    def retry_failed_jobs(self) -> int:
        """Move every failed job back onto the queue and return how many moved."""

        registry = self.queue.failed_job_registry
        requeued = 0
        for job_id in registry.get_job_ids():
            try:
                registry.requeue(job_id)
            except Exception:
                logger.exception("Could not requeue failed delivery job %s", job_id)
                continue
            requeued += 1
        logger.info("Requeued %d failed delivery job(s)", requeued)
        return requeued


__all__ = [
    "DELIVERY_TASK",
    "RQDeliveryQueue",
    "delivery_job_id",
    "retry_intervals",
]
