from __future__ import annotations

from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.value_objects.enums import UserStatus


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> Identity | None: ...

    async def get_many(self, user_ids: list[UUID]) -> list[Identity]: ...


class UserWriter(Protocol):
    async def set_status(self, user_id: UUID, status: UserStatus) -> None: ...
