"""Read-only identity directory used to resolve notification recipients."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from notification_engine.domain.entities import Recipient
from notification_engine.infrastructure.models import (
    DepartmentModel,
    EmployeeModel,
    RoleModel,
    UserModel,
)


class UserRepository:
    """Look up active users, their roles and reporting lines."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active_ids_by_role(self, aliases: Iterable[str]) -> list[int]:
        """Return ids of active users whose role alias is one of ``aliases``."""

        wanted = [alias for alias in aliases if alias]
        if not wanted:
            return []
        rows = (
            self._active_users()
            .join(RoleModel, UserModel.role_id == RoleModel.id)
            .filter(RoleModel.alias.in_(wanted))
            .order_by(UserModel.id)
            .with_entities(UserModel.id)
            .all()
        )
        return [user_id for (user_id,) in rows]

    def get_recipients(self, user_ids: Sequence[int]) -> list[Recipient]:
        """Return recipients for the users in ``user_ids``.

        The input order is preserved. Unknown and deleted ids are dropped; inactive
        users are kept so explicitly addressed recipients still hear about events.
        """

        ids = list(dict.fromkeys(user_id for user_id in user_ids if user_id is not None))
        if not ids:
            return []
        models = (
            self.session.query(UserModel)
            .filter(UserModel.deleted.is_(False))
            .options(joinedload(UserModel.role))
            .filter(UserModel.id.in_(ids))
            .all()
        )
        by_id = {model.id: model for model in models}
        return [self._to_recipient(by_id[user_id]) for user_id in ids if user_id in by_id]

    def get_supervisor_id(self, technician_user_id: int) -> int | None:
        row = (
            self.session.query(EmployeeModel.reports_to)
            .filter(EmployeeModel.user_id == technician_user_id)
            .first()
        )
        return row[0] if row else None

    def get_user_id_for_employee(self, employee_id: int) -> int | None:
        row = (
            self.session.query(EmployeeModel.user_id)
            .filter(EmployeeModel.id == employee_id)
            .first()
        )
        return row[0] if row else None

    def list_current_employee_user_ids(self, *, today: date | None = None) -> list[int]:
        """Return user ids of employees that have not been terminated."""

        today = today or date.today()
        rows = (
            self.session.query(EmployeeModel.user_id)
            .filter(EmployeeModel.user_id.isnot(None))
            .filter(
                or_(
                    EmployeeModel.termination_date.is_(None),
                    EmployeeModel.termination_date > today,
                )
            )
            .order_by(EmployeeModel.id)
            .all()
        )
        return [user_id for (user_id,) in rows]

    def get_department_manager_id(self, department_id: int) -> int | None:
        row = (
            self.session.query(DepartmentModel.manager_id)
            .filter(DepartmentModel.id == department_id)
            .first()
        )
        return row[0] if row else None

    def _active_users(self):
        return (
            self.session.query(UserModel)
            .filter(UserModel.deleted.is_(False))
            .filter(UserModel.is_active.is_(True))
        )

    @staticmethod
    def _to_recipient(model: UserModel) -> Recipient:
        return Recipient(
            id=model.id,
            email=model.email,
            phone=model.phone,
            full_name=model.full_name,
            role=model.role.alias if model.role else None,
        )


__all__ = ["UserRepository"]
