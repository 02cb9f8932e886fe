"""Resolve which users receive a notification for a triggered event."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    NotificationEvent,
    NotificationRule,
    Recipient,
)
from notification_engine.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
    UserRepository,
)
from notification_engine.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

ROLE_MANAGER = "manager"
ROLE_EXECUTIVE = "executive"
ROLE_ADMIN = "admin"
ROLE_SUPERVISOR = "supervisor"


def _as_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring recipient hint %r: not an id", value)
        return None


def _as_ids(values: Any) -> list[int]:
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        values = [values]
    resolved = (_as_id(value) for value in values)
    return [user_id for user_id in resolved if user_id is not None]


class RecipientResolver:
    """Turn a rule's recipient role tokens into concrete users.

    Tokens are processed in the order the rule lists them and the resulting ids
    keep their first-seen position. Users missing from the directory are
    dropped. Each returned recipient carries its stored preferences.
    """

    def __init__(self, session: Session) -> None:
        self.users = UserRepository(session)
        self.preferences = NotificationPreferenceRepository(session)
        self.notifications = NotificationRepository(session)
        self._strategies: dict[str, Callable[[dict[str, Any]], list[int]]] = {
            "user": self._specific_user,
            "technician": self._assigned_technicians,
            "assigned_technician": self._assigned_technicians,
            "manager": self._managers,
            "project_manager": self._managers,
            "executive": self._executives,
            "admin": self._admins,
            "supervisor": self._supervisors,
            "client": self._client,
            "driver": self._driver,
            "employee": self._employee,
            "all_employees": self._all_employees,
            "department_manager": self._department_manager,
            "explicit": self._explicit,
        }

    def resolve(
        self,
        event: NotificationEvent,
        rule: NotificationRule,
        *,
        now: datetime | None = None,
    ) -> list[Recipient]:
        data = event.data or {}
        user_ids: dict[int, None] = {}
        for token in rule.recipient_roles:
            strategy = self._strategies.get(token)
            if strategy is None:
                logger.warning(
                    "Unknown recipient role %r on rule %s", token, rule.event_type
                )
                continue
            for user_id in strategy(data):
                user_ids.setdefault(user_id, None)

        recipients = self.users.get_recipients(list(user_ids))

        if rule.exclude_actor and event.triggered_by is not None:
            actor = str(event.triggered_by)
            recipients = [
                recipient for recipient in recipients if str(recipient.id) != actor
            ]

        if rule.dedupe_window_seconds and recipients:
            recipients = self._drop_recently_notified(
                recipients, event, rule, now=now or now_in_app_timezone()
            )

        if recipients:
            preferences = self.preferences.get_map_for_users(
                recipient.id for recipient in recipients
            )
            for recipient in recipients:
                recipient.preferences = preferences[recipient.id]

        logger.debug(
            "Resolved %d recipient(s) for event type %s", len(recipients), event.type
        )
        return recipients

    def _drop_recently_notified(
        self,
        recipients: list[Recipient],
        event: NotificationEvent,
        rule: NotificationRule,
        *,
        now: datetime,
    ) -> list[Recipient]:
        entity_id = (event.data or {}).get("entity_id")
        already_notified = self.notifications.user_ids_notified_since(
            (recipient.id for recipient in recipients),
            event_type=event.type,
            related_entity_id=str(entity_id) if entity_id is not None else None,
            since=now - timedelta(seconds=rule.dedupe_window_seconds),
        )
        if already_notified:
            logger.info(
                "Skipping %d recipient(s) already notified about %s",
                len(already_notified),
                event.type,
            )
        return [
            recipient for recipient in recipients if recipient.id not in already_notified
        ]

    def _specific_user(self, data: dict[str, Any]) -> list[int]:
        return _as_ids(data.get("user_id"))

    def _assigned_technicians(self, data: dict[str, Any]) -> list[int]:
        return _as_ids(data.get("assigned_technician_id")) + _as_ids(
            data.get("assigned_technician_ids")
        )

    def _managers(self, data: dict[str, Any]) -> list[int]:
        return (
            self.users.list_active_ids_by_role([ROLE_MANAGER])
            + _as_ids(data.get("project_manager_id"))
            + _as_ids(data.get("manager_id"))
        )

    def _executives(self, data: dict[str, Any]) -> list[int]:
        return self.users.list_active_ids_by_role([ROLE_EXECUTIVE]) + _as_ids(
            data.get("executive_ids")
        )

    def _admins(self, data: dict[str, Any]) -> list[int]:
        return self.users.list_active_ids_by_role([ROLE_ADMIN])

    def _supervisors(self, data: dict[str, Any]) -> list[int]:
        technician_id = _as_id(data.get("assigned_technician_id"))
        if technician_id is None:
            return self.users.list_active_ids_by_role([ROLE_SUPERVISOR])
        supervisor_id = self.users.get_supervisor_id(technician_id)
        if supervisor_id is None:
            logger.info(
                "No direct supervisor found for technician %s, skipping supervisor",
                technician_id,
            )
            return []
        return [supervisor_id]

    def _client(self, data: dict[str, Any]) -> list[int]:
        return _as_ids(data.get("client_id"))

    def _driver(self, data: dict[str, Any]) -> list[int]:
        return _as_ids(data.get("driver_id"))

    def _employee(self, data: dict[str, Any]) -> list[int]:
        employee_id = _as_id(data.get("employee_id"))
        if employee_id is None:
            return []
        return _as_ids(self.users.get_user_id_for_employee(employee_id))

    def _all_employees(self, data: dict[str, Any]) -> list[int]:
        return self.users.list_current_employee_user_ids()

    def _department_manager(self, data: dict[str, Any]) -> list[int]:
        department_id = _as_id(data.get("department_id"))
        if department_id is None:
            return []
        return _as_ids(self.users.get_department_manager_id(department_id))

    def _explicit(self, data: dict[str, Any]) -> list[int]:
        return _as_ids(data.get("recipient_ids"))


__all__ = ["RecipientResolver"]
