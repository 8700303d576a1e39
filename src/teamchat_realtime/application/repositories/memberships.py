from __future__ import annotations

from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.membership import Membership


class MembershipReader(Protocol):
    async def is_team_member(self, team_id: UUID, user_id: UUID) -> bool: ...

    async def list_team_members(self, team_id: UUID) -> list[Membership]: ...

    async def list_team_ids_for_user(self, user_id: UUID) -> list[UUID]: ...
