from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.direct_message import DirectMessage


class DirectMessageReader(Protocol):
    async def list_conversation(
        self, user_id: UUID, peer_id: UUID, *, limit: int = 100
    ) -> list[DirectMessage]: ...

    async def count_from_after(
        self, sender_id: UUID, receiver_id: UUID, after: datetime
    ) -> int: ...

    async def list_sender_ids_to(self, receiver_id: UUID) -> list[UUID]:
        """Distinct users who have ever sent a DM to `receiver_id`."""
        ...


class DirectMessageWriter(Protocol):
    async def create(self, message: DirectMessage) -> DirectMessage: ...

    async def mark_read(
        self, sender_id: UUID, receiver_id: UUID, up_to: datetime
    ) -> int:
        """Flip `read` on sender → receiver messages created at or before `up_to`."""
        ...
