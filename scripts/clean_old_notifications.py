"""Scheduled task removing old notifications from user inboxes."""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from notification_engine.application.use_cases.notifications import clean_old_notifications
from notification_engine.config import get_settings
from notification_engine.infrastructure.database import SessionLocal


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Soft delete notifications older than the retention period.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=get_settings().notification_retention_days,
        help="Number of days of notifications to keep (default: %(default)s)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session = SessionLocal()
    try:
        removed = clean_old_notifications(session, days_to_keep=args.days)
    except ValueError as exc:
        raise SystemExit(f"Invalid retention period: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while cleaning notifications: {exc}") from exc
    else:
        print(f"Removed {removed} notification(s) older than {args.days} day(s).")
    finally:
        session.close()


if __name__ == "__main__":
    main()
