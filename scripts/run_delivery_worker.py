"""Start an RQ worker that delivers queued notification emails and SMS."""

from __future__ import annotations

import argparse
import logging

from redis import Redis
from rq import Worker

from notification_engine.config import get_settings

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the notification delivery worker.")
    parser.add_argument(
        "--queues",
        nargs="+",
        default=[settings.notification_queue_name],
        help="Queues to listen on (default: %(default)s)",
    )
    parser.add_argument(
        "--burst",
        action="store_true",
        help="Process every pending job and exit.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    connection = Redis.from_url(settings.redis_url)
    try:
        connection.ping()
    except Exception as exc:
        raise SystemExit(f"Could not connect to Redis at {settings.redis_url}: {exc}") from exc

    logger.info("Listening on queue(s): %s", ", ".join(args.queues))
    worker = Worker(args.queues, connection=connection)
    # Retries with an interval sit in the scheduled registry until the scheduler requeues them.
    try:
        worker.work(burst=args.burst, with_scheduler=True)
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
