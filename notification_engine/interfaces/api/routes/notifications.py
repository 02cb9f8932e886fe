"""Websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.notifications import (
    delete_notification,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
)
from notification_engine.infrastructure.database import SessionLocal, session_scope
from notification_engine.infrastructure.notifications import (
    notification_gateway,
    notification_manager,
)
from notification_engine.infrastructure.repositories import (
    NotificationRepository,
    UserRepository,
)
from notification_engine.interfaces.api.schemas import (
    NotificationClientMessage,
    NotificationInit,
    NotificationRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

POLICY_VIOLATION = 1008
INTERNAL_ERROR = 1011


def _parse_user_id(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        user_id = int(raw)
    except ValueError:
        return None
    return user_id if user_id > 0 else None


def _build_init(session: Session, user_id: int) -> dict[str, Any]:
    repository = NotificationRepository(session)
    snapshot = NotificationInit(
        notifications=[
            NotificationRead.model_validate(notification)
            for notification in repository.list_unread_for_user(user_id)
        ],
        unread_count=repository.count_unread(user_id),
    )
    return {"type": "init", "data": snapshot.model_dump(mode="json")}


def _handle_command(user_id: int, command: NotificationClientMessage) -> None:
    with session_scope() as session:
        if command.type == "mark_notification_read":
            mark_as_read(
                session, command.notification_id, user_id, gateway=notification_gateway
            )
        elif command.type == "mark_all_notifications_read":
            mark_all_as_read(session, user_id, gateway=notification_gateway)
        elif command.type == "delete_notification":
            delete_notification(
                session, command.notification_id, user_id, gateway=notification_gateway
            )


def _error(detail: str) -> dict[str, Any]:
    return {"type": "error", "data": {"detail": detail}}


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream notifications to a user and accept inbox commands.

    The caller is identified by the ``user_id`` query parameter; authenticating
    that identity is the responsibility of the gateway in front of this service.
    """

    user_id = _parse_user_id(websocket.query_params.get("user_id"))
    if user_id is None:
        await websocket.close(code=POLICY_VIOLATION)
        return

    session = SessionLocal()
    try:
        if not UserRepository(session).get_recipients([user_id]):
            await websocket.close(code=POLICY_VIOLATION)
            return
        init_message = _build_init(session, user_id)
    except Exception:
        logger.exception("Could not load notifications for user %s", user_id)
        await websocket.close(code=INTERNAL_ERROR)
        return
    finally:
        session.close()

    await notification_manager.connect(user_id, websocket)
    try:
        await websocket.send_json(init_message)
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except Exception:
                await websocket.send_json(_error("Messages must be JSON objects"))
                continue

            try:
                command = NotificationClientMessage.model_validate(message)
            except ValidationError:
                await websocket.send_json(_error("Unsupported message"))
                continue

            if command.type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if command.notification_id is None and command.type in (
                "mark_notification_read",
                "delete_notification",
            ):
                await websocket.send_json(_error("notification_id is required"))
                continue

            try:
                _handle_command(user_id, command)
            except Exception:
                logger.exception(
                    "Failed to handle %s for user %s", command.type, user_id
                )
                await websocket.send_json(_error("Command failed"))
    except WebSocketDisconnect:
        notification_manager.disconnect(user_id, websocket)
    except Exception:
        notification_manager.disconnect(user_id, websocket)
        raise
