"""Integration tests for the notifications websocket."""

from __future__ import annotations

from contextlib import contextmanager

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from notification_engine.domain.entities import Notification
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.infrastructure.repositories import NotificationRepository
from notification_engine.interfaces.api.routes import notifications as routes_module


@pytest.fixture()
def client(monkeypatch, session_factory):
    """Return a test client whose websocket handler uses the test database."""

    @contextmanager
    def _scope():
        db = session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    monkeypatch.setattr(routes_module, "SessionLocal", session_factory)
    monkeypatch.setattr(routes_module, "session_scope", _scope)

    from main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


def _create(session, user_id: int) -> Notification:
    return NotificationRepository(session).create(
        Notification(
            id=None,
            user_id=user_id,
            category="job",
            event_type="job_assigned",
            title="New Job Assigned",
            message="You have been assigned to job Roof",
        )
    )


def test_websocket_streams_inbox_and_handles_commands(client, session, make_user) -> None:
    user_id = make_user("technician")
    first = _create(session, user_id)
    _create(session, user_id)

    with client.websocket_connect(f"/notifications/ws?user_id={user_id}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert init["data"]["unread_count"] == 2
        assert len(init["data"]["notifications"]) == 2

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "mark_notification_read", "notification_id": first.id})
        assert websocket.receive_json() == {"type": "unread_count", "data": {"count": 1}}

        websocket.send_json({"type": "delete_notification"})
        assert websocket.receive_json() == {
            "type": "error",
            "data": {"detail": "notification_id is required"},
        }

        websocket.send_json({"type": "launch_rockets"})
        assert websocket.receive_json()["data"]["detail"] == "Unsupported message"

    session.expire_all()
    assert session.get(NotificationModel, first.id).read is True


@pytest.mark.parametrize("query", ["", "?user_id=abc", "?user_id=999"])
def test_websocket_rejects_unknown_users(client, make_user, query) -> None:
    make_user()

    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect(f"/notifications/ws{query}") as websocket:
            websocket.receive_json()

    assert excinfo.value.code == routes_module.POLICY_VIOLATION
