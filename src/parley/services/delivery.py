"""Live delivery of new messages to connected recipients.

The connection registry is owned by the WebSocket transport: it is created at
application startup, mutated only when a socket is accepted or closes, and
handed to the notifier by reference.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Protocol

from fastapi import WebSocketDisconnect

logger = logging.getLogger(__name__)

EVENT_MESSAGE_CREATED = "message.created"


class PushConnection(Protocol):
    """Anything that can push a JSON frame to a client (e.g. a WebSocket)."""

    async def send_json(self, data: Any) -> None: ...


class ConnectionRegistry:
    """Thread-safe mapping of user id to that user's live connection."""

    def __init__(self) -> None:
        self._connections: dict[str, PushConnection] = {}
        self._lock = Lock()

    def register(self, user_id: str, connection: PushConnection) -> None:
        """Record ``connection`` as the user's active connection, replacing any older one."""
        with self._lock:
            self._connections[user_id] = connection

    def unregister(self, user_id: str, connection: PushConnection | None = None) -> None:
        """Forget the user's connection.

        When ``connection`` is given, the entry is only removed if it still
        points at that handle, so a late disconnect of an old socket does not
        drop a newer one.
        """
        with self._lock:
            current = self._connections.get(user_id)
            if current is None:
                return
            if connection is None or current is connection:
                del self._connections[user_id]

    def get(self, user_id: str) -> PushConnection | None:
        with self._lock:
            return self._connections.get(user_id)

    def is_online(self, user_id: str) -> bool:
        return self.get(user_id) is not None

    def online_users(self) -> list[str]:
        with self._lock:
            return list(self._connections)


class DeliveryNotifier:
    """Pushes message events to recipients that are currently connected."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def notify(self, recipient_id: str, payload: dict[str, Any]) -> bool:
        """Push ``payload`` to the recipient if online.

        Offline recipients are a silent no-op; nothing is queued. A push that
        fails because the socket went away is logged and dropped.

        Returns:
            True if the event was handed to a live connection.
        """
        connection = self.registry.get(recipient_id)
        if connection is None:
            return False

        try:
            await connection.send_json({"type": EVENT_MESSAGE_CREATED, "data": payload})
        except (WebSocketDisconnect, RuntimeError, OSError, ConnectionError) as exc:
            logger.warning("Live delivery to %s failed: %s", recipient_id, exc)
            return False
        return True
