from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from teamchat_realtime.domain.value_objects.view_state import ViewState


class Connection(Protocol):
    """Live connection handle as seen by delivery paths."""

    user_id: UUID
    username: str
    view: ViewState

    async def send(self, event_type: str, data: dict[str, Any]) -> None:
        """Push one event. Raises DeliveryFailure if the transport is gone."""
        ...


class PresenceLookup(Protocol):
    def lookup(self, user_id: UUID) -> Connection | None: ...

    def room_connections(self, channel_id: UUID) -> list[Connection]: ...


class ConnectionRegistry(PresenceLookup, Protocol):
    def register(self, connection: Connection) -> Connection | None: ...

    def unregister(self, connection: Connection) -> bool: ...

    def is_online(self, user_id: UUID) -> bool: ...

    def join(self, channel_id: UUID, connection: Connection) -> None: ...

    def leave(self, channel_id: UUID, connection: Connection) -> None: ...
