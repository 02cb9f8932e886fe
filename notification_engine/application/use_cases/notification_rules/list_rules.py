"""Use case for listing notification rules."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def get_all_rules(session: Session) -> Sequence[NotificationRule]:
    """Return every notification rule ordered by category and event type."""

    return NotificationRuleRepository(session).list()
