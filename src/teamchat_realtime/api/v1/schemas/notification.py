from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from teamchat_realtime.domain.value_objects.enums import NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    type: NotificationType
    title: str
    body: str
    channel_id: UUID | None
    channel_name: str | None
    from_user_id: UUID
    from_username: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
