from __future__ import annotations

from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.channel import ChannelRef


class ChannelReader(Protocol):
    async def get_by_id(self, channel_id: UUID) -> ChannelRef | None: ...

    async def list_for_teams(self, team_ids: list[UUID]) -> list[ChannelRef]: ...
