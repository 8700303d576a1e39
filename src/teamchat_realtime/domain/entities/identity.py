from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from teamchat_realtime.domain.value_objects.enums import UserStatus


@dataclass(frozen=True, slots=True)
class Identity:
    id: UUID
    username: str
    status: UserStatus = UserStatus.OFFLINE
