"""Utility script to install the default notification rules."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from notification_engine.application.use_cases.notification_rules import seed_default_rules
from notification_engine.infrastructure.database import SessionLocal, initialize_database


def main() -> None:
    initialize_database()

    session = SessionLocal()
    try:
        created = seed_default_rules(session)
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not seed notification rules: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while seeding rules: {exc}") from exc
    else:
        print(f"Created {created} notification rule(s).")
    finally:
        session.close()


if __name__ == "__main__":
    main()
