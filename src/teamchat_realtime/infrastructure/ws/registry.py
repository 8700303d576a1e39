"""In-process presence registry: user → live connection, channel → room."""
from __future__ import annotations

import logging
import threading
from typing import Any
from uuid import UUID

from teamchat_realtime.application.exceptions import DeliveryFailure
from teamchat_realtime.application.ports.presence import Connection

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Tracks the single active connection per user and channel room subscriptions.

    Constructed once per process and shared by every connection task. All
    mutations happen under one short, non-awaiting lock so each operation is
    atomic per key.

    Policy for a second connection by the same user: last writer wins. The
    earlier socket stays open but is no longer routable; when it later closes,
    `unregister` leaves the newer entry untouched.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[UUID, Connection] = {}
        self._rooms: dict[UUID, set[Connection]] = {}

    def register(self, connection: Connection) -> Connection | None:
        """Route `connection.user_id` to `connection`. Returns the displaced handle."""
        with self._lock:
            previous = self._connections.get(connection.user_id)
            self._connections[connection.user_id] = connection
        if previous is not None and previous is not connection:
            logger.warning(
                "User %s registered a new connection; %r is no longer routable",
                connection.user_id,
                previous,
            )
            return previous
        return None

    def unregister(self, connection: Connection) -> bool:
        """Drop `connection` everywhere. True if it was the user's routable entry."""
        with self._lock:
            for members in self._rooms.values():
                members.discard(connection)
            self._rooms = {cid: m for cid, m in self._rooms.items() if m}
            if self._connections.get(connection.user_id) is connection:
                del self._connections[connection.user_id]
                removed = True
            else:
                removed = False
        logger.debug("Unregistered %r (routable=%s)", connection, removed)
        return removed

    def lookup(self, user_id: UUID) -> Connection | None:
        with self._lock:
            return self._connections.get(user_id)

    def is_online(self, user_id: UUID) -> bool:
        return self.lookup(user_id) is not None

    def online_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def join(self, channel_id: UUID, connection: Connection) -> None:
        with self._lock:
            self._rooms.setdefault(channel_id, set()).add(connection)

    def leave(self, channel_id: UUID, connection: Connection) -> None:
        with self._lock:
            members = self._rooms.get(channel_id)
            if members:
                members.discard(connection)
                if not members:
                    del self._rooms[channel_id]

    def room_connections(self, channel_id: UUID) -> list[Connection]:
        with self._lock:
            return list(self._rooms.get(channel_id, ()))

    def all_connections(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Push an event to every registered connection on this process."""
        for connection in self.all_connections():
            try:
                await connection.send(event_type, data)
            except DeliveryFailure as exc:
                logger.warning("Broadcast %s skipped a connection: %s", event_type, exc)
