from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from teamchat_realtime.domain.value_objects.enums import NotificationType


@dataclass(frozen=True, slots=True)
class Notification:
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    body: str
    from_user_id: UUID
    from_username: str
    created_at: datetime
    channel_id: UUID | None = None
    channel_name: str | None = None
    read: bool = False
