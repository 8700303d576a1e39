from __future__ import annotations

from typing import Protocol
from uuid import UUID

from teamchat_realtime.domain.entities.notification import Notification


class NotificationReader(Protocol):
    async def list_for_user(
        self, user_id: UUID, *, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]: ...


class NotificationWriter(Protocol):
    async def create(self, notification: Notification) -> Notification: ...

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        """Return False if no such notification belongs to the user."""
        ...
