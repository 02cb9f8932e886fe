"""Registry of open notification websockets."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track open websockets per user and fan messages out to them."""

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        """Event loop serving the websockets, once a client has connected."""

        return self._loop

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept ``websocket`` and remember the loop serving it."""

        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self._connections[user_id].add(websocket)
        logger.debug("User %s connected to notifications", user_id)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Forget ``websocket``; the user entry goes away with its last socket."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def is_connected(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    def connection_count(self) -> int:
        return sum(len(connections) for connections in self._connections.values())

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> None:
        """Send ``message`` to each socket of ``user_id``, dropping broken ones."""

        connections = list(self._connections.get(user_id, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:
                logger.debug("Dropping stale connection for user %s", user_id)
                self.disconnect(user_id, connection)


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
