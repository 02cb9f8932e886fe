"""Shared fixtures for the notification engine test-suite."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from notification_engine.config import reset_settings_cache  # noqa: E402
from notification_engine.infrastructure import models  # noqa: E402,F401
from notification_engine.infrastructure.database import Base  # noqa: E402
from notification_engine.infrastructure.models import (  # noqa: E402
    DepartmentModel,
    EmployeeModel,
    RoleModel,
    UserModel,
)


class FakeGateway:
    """Realtime gateway that records every event instead of pushing it."""

    def __init__(self, *, fail_for: set[int] | None = None) -> None:
        self.pushed: list[tuple[int, object]] = []
        self.counts: list[tuple[int, int]] = []
        self.deleted: list[tuple[int, int]] = []
        self.fail_for = fail_for or set()

    def send_notification_to_user(self, user_id, notification):
        if user_id in self.fail_for:
            raise RuntimeError("socket closed")
        self.pushed.append((user_id, notification))

    def update_unread_count(self, user_id, count):
        self.counts.append((user_id, count))

    def broadcast_notification_deleted(self, user_id, notification_id):
        self.deleted.append((user_id, notification_id))


class FakeQueue:
    """Delivery queue that keeps jobs in memory."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.jobs = []
        self.error = error

    def enqueue(self, job):
        if self.error is not None:
            raise self.error
        self.jobs.append(job)
        return f"notification-{job.notification_id}"


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture()
def roles(session) -> dict[str, int]:
    """Create one role per alias used by the recipient strategies."""

    created = {}
    for alias in ("manager", "executive", "admin", "supervisor", "technician", "client"):
        role = RoleModel(name=alias.title(), alias=alias)
        session.add(role)
        session.flush()
        created[alias] = role.id
    session.commit()
    return created


@pytest.fixture()
def make_user(session, roles):
    """Return a factory inserting users with the given role alias."""

    def _make_user(
        role: str | None = None,
        *,
        email: str | None = "user@example.com",
        phone: str | None = None,
        full_name: str = "Test User",
        is_active: bool = True,
        deleted: bool = False,
    ) -> int:
        user = UserModel(
            role_id=roles[role] if role else None,
            full_name=full_name,
            email=email,
            phone=phone,
            is_active=is_active,
            deleted=deleted,
        )
        session.add(user)
        session.commit()
        return user.id

    return _make_user


@pytest.fixture()
def make_employee(session):
    def _make_employee(
        user_id: int | None,
        *,
        reports_to: int | None = None,
        department_id: int | None = None,
        termination_date=None,
    ) -> int:
        employee = EmployeeModel(
            user_id=user_id,
            reports_to=reports_to,
            department_id=department_id,
            termination_date=termination_date,
        )
        session.add(employee)
        session.commit()
        return employee.id

    return _make_employee


@pytest.fixture()
def make_department(session):
    def _make_department(name: str = "Operations", manager_id: int | None = None) -> int:
        department = DepartmentModel(name=name, manager_id=manager_id)
        session.add(department)
        session.commit()
        return department.id

    return _make_department
