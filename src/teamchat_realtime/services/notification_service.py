from __future__ import annotations

import uuid
from typing import Any

from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.exceptions import NotFoundError
from teamchat_realtime.application.ports.clock import Clock
from teamchat_realtime.application.uow import UnitOfWork
from teamchat_realtime.config import settings
from teamchat_realtime.domain.entities.channel import ChannelRef
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.entities.notification import Notification
from teamchat_realtime.domain.value_objects.enums import (
    NotificationPriority,
    NotificationType,
)

IMAGE_PREVIEW = "sent an image"


def preview(text: str | None) -> str:
    if not text:
        return IMAGE_PREVIEW
    limit = settings.NOTIFICATION_PREVIEW_CHARS
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def priority_for(ntype: NotificationType) -> NotificationPriority:
    if ntype == NotificationType.MESSAGE:
        return NotificationPriority.NORMAL
    return NotificationPriority.HIGH


def channel_notification_text(
    ntype: NotificationType,
    sender: Identity,
    channel: ChannelRef,
    text: str | None,
) -> tuple[str, str]:
    if ntype == NotificationType.MENTION:
        return f"{sender.username} mentioned you in #{channel.name}", preview(text)
    return f"New message in #{channel.name}", f"{sender.username}: {preview(text)}"


def dm_notification_text(sender: Identity, text: str | None) -> tuple[str, str]:
    return f"New message from {sender.username}", preview(text)


async def create_notification(
    uow: UnitOfWork,
    *,
    recipient_id: uuid.UUID,
    ntype: NotificationType,
    title: str,
    body: str,
    sender: Identity,
    clock: Clock,
    channel: ChannelRef | None = None,
) -> Notification:
    notification = Notification(
        id=uuid.uuid4(),
        user_id=recipient_id,
        type=ntype,
        title=title,
        body=body,
        from_user_id=sender.id,
        from_username=sender.username,
        created_at=clock.now(),
        channel_id=channel.id if channel else None,
        channel_name=channel.name if channel else None,
    )
    notification = await uow.notifications_w.create(notification)
    await uow.commit()
    return notification


def notification_payload(
    notification: Notification,
    *,
    unread_count: int,
) -> dict[str, Any]:
    return {
        "id": str(notification.id),
        "type": notification.type.value,
        "priority": priority_for(notification.type).value,
        "title": notification.title,
        "body": notification.body,
        "channel_id": str(notification.channel_id) if notification.channel_id else None,
        "channel_name": notification.channel_name,
        "from_user_id": str(notification.from_user_id),
        "from_username": notification.from_username,
        "unread_count": unread_count,
        "read": notification.read,
        "created_at": notification.created_at.isoformat(),
    }


async def list_notifications(
    principal: Principal,
    unread_only: bool,
    limit: int,
    uow: UnitOfWork,
) -> list[Notification]:
    return await uow.notifications.list_for_user(
        principal.user_id, unread_only=unread_only, limit=limit,
    )


async def mark_notification_read(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    updated = await uow.notifications_w.mark_read(notification_id, principal.user_id)
    if not updated:
        raise NotFoundError("Notification not found")
    await uow.commit()
