"""Channel message fan-out: persist, deliver to the team, notify the inattentive."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from teamchat_realtime.application.dto.message import SendChannelMessageDTO
from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.exceptions import (
    EmptyMessageError,
    NotFoundError,
    ValidationError,
)
from teamchat_realtime.application.policies.permissions import (
    assert_channel_access,
    assert_team_member,
)
from teamchat_realtime.application.ports.clock import Clock, SystemClock
from teamchat_realtime.application.ports.presence import Connection, PresenceLookup
from teamchat_realtime.application.uow import UnitOfWork
from teamchat_realtime.domain.content import normalize_image_ref, normalize_text
from teamchat_realtime.domain.entities.channel import ChannelRef
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.entities.message import ChannelMessage
from teamchat_realtime.domain.value_objects.enums import NotificationType
from teamchat_realtime.services import mention_service, notification_service, unread_service
from teamchat_realtime.services.delivery import deliver

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


def message_payload(message: ChannelMessage, author: Identity) -> dict[str, Any]:
    return {
        "id": str(message.id),
        "channel_id": str(message.channel_id),
        "team_id": str(message.team_id),
        "author_id": str(message.author_id),
        "username": author.username,
        "text": message.text,
        "image_ref": message.image_ref,
        "created_at": message.created_at.isoformat(),
    }


async def send_channel_message(
    principal: Principal,
    dto: SendChannelMessageDTO,
    uow: UnitOfWork,
    presence: PresenceLookup,
    *,
    origin: Connection | None = None,
    clock: Clock = _system_clock,
) -> ChannelMessage:
    """Persist a channel message, then fan it out to every member of the team.

    Everything up to and including the commit of the message raises to the
    caller. After that the message counts as sent: delivery failures are
    logged, and a failure for one recipient does not affect the others.

    The author's copy goes to ``origin`` when given, so the sending socket
    sees its own message even if a newer connection took over the user.
    """
    channel = await uow.channels.get_by_id(dto.channel_id)
    if channel is None:
        raise NotFoundError("Channel not found")
    await assert_team_member(channel.team_id, principal.user_id, uow.memberships)
    if dto.team_id is not None and dto.team_id != channel.team_id:
        raise ValidationError("Channel does not belong to this team")

    text = normalize_text(dto.text)
    image_ref = normalize_image_ref(dto.image_ref)
    if text is None and image_ref is None:
        raise EmptyMessageError()

    author = await uow.users.get_by_id(principal.user_id)
    if author is None:
        raise NotFoundError("User not found")

    message = await uow.messages_w.create(
        ChannelMessage(
            id=uuid.uuid4(),
            channel_id=channel.id,
            team_id=channel.team_id,
            author_id=author.id,
            text=text,
            image_ref=image_ref,
            created_at=clock.now(),
        )
    )
    await uow.commit()
    logger.info(
        "Message %s from %s persisted in channel %s", message.id, author.id, channel.id,
    )

    mentioned = await mention_service.resolve_mentions(
        mention_service.detect_mentions(text), channel.team_id, uow,
    )
    audience = await uow.memberships.list_team_members(channel.team_id)
    payload = message_payload(message, author)

    for member in audience:
        try:
            await _fan_out_to_member(
                member.user_id, message, channel, author, mentioned, payload,
                uow, presence, origin, clock,
            )
        except Exception:
            logger.exception(
                "Fan-out of message %s to user %s failed", message.id, member.user_id,
            )
            await uow.rollback()

    return message


async def _fan_out_to_member(
    member_id: uuid.UUID,
    message: ChannelMessage,
    channel: ChannelRef,
    author: Identity,
    mentioned: set[uuid.UUID],
    payload: dict[str, Any],
    uow: UnitOfWork,
    presence: PresenceLookup,
    origin: Connection | None,
    clock: Clock,
) -> None:
    if member_id == author.id and origin is not None:
        connection = origin
    else:
        connection = presence.lookup(member_id)
    if connection is not None:
        await deliver(connection, "receive-message", payload)

    if member_id == author.id:
        return
    if connection is not None and connection.view.is_viewing_channel(channel.id):
        return

    unread_count = await unread_service.channel_unread(member_id, channel.id, uow)
    ntype = NotificationType.MENTION if member_id in mentioned else NotificationType.MESSAGE
    title, body = notification_service.channel_notification_text(
        ntype, author, channel, message.text,
    )
    notification = await notification_service.create_notification(
        uow,
        recipient_id=member_id,
        ntype=ntype,
        title=title,
        body=body,
        sender=author,
        clock=clock,
        channel=channel,
    )

    if connection is not None:
        await deliver(
            connection,
            "notification",
            notification_service.notification_payload(
                notification, unread_count=unread_count,
            ),
        )


async def list_channel_messages(
    channel_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[ChannelMessage]:
    await assert_channel_access(
        channel_id, principal.user_id, uow.channels, uow.memberships,
    )
    return await uow.messages.list_messages(channel_id, cursor=cursor, limit=limit)
