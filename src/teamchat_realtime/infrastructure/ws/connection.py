from __future__ import annotations

import asyncio
import uuid
from typing import Any
from uuid import UUID

from fastapi import WebSocket

from teamchat_realtime.application.exceptions import DeliveryFailure
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.value_objects.view_state import ViewState
from teamchat_realtime.infrastructure.ws.protocol import WsOutbound


class WsConnection:
    """One authenticated socket plus the view state owned by its task."""

    def __init__(self, websocket: WebSocket, identity: Identity) -> None:
        self.id = uuid.uuid4().hex
        self.user_id: UUID = identity.id
        self.username = identity.username
        self.view = ViewState()
        self._ws = websocket
        self._send_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"WsConnection(id={self.id}, user_id={self.user_id})"

    async def send(self, event_type: str, data: dict[str, Any]) -> None:
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            async with self._send_lock:
                await self._ws.send_text(raw)
        except Exception as exc:
            raise DeliveryFailure(
                f"{event_type} to user {self.user_id} failed: {exc}"
            ) from exc
