from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from teamchat_realtime.domain.value_objects.enums import UserStatus


@dataclass(frozen=True, slots=True)
class PresenceChanged:
    user_id: UUID
    username: str
    status: UserStatus

    def to_payload(self) -> dict[str, Any]:
        return {
            "user_id": str(self.user_id),
            "username": self.username,
            "status": self.status.value,
        }
