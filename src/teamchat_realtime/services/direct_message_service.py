from __future__ import annotations

import logging
import uuid
from typing import Any

from teamchat_realtime.application.dto.message import SendDirectMessageDTO
from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.exceptions import (
    EmptyMessageError,
    NotFoundError,
    ValidationError,
)
from teamchat_realtime.application.ports.clock import Clock, SystemClock
from teamchat_realtime.application.ports.presence import Connection, PresenceLookup
from teamchat_realtime.application.uow import UnitOfWork
from teamchat_realtime.domain.content import normalize_image_ref, normalize_text
from teamchat_realtime.domain.entities.direct_message import DirectMessage
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.value_objects.enums import NotificationType
from teamchat_realtime.services import notification_service, unread_service
from teamchat_realtime.services.delivery import deliver

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


def direct_message_payload(
    message: DirectMessage,
    sender: Identity,
) -> dict[str, Any]:
    return {
        "id": str(message.id),
        "sender_id": str(message.sender_id),
        "sender_username": sender.username,
        "receiver_id": str(message.receiver_id),
        "text": message.text,
        "image_ref": message.image_ref,
        "read": message.read,
        "created_at": message.created_at.isoformat(),
    }


async def send_direct_message(
    principal: Principal,
    dto: SendDirectMessageDTO,
    uow: UnitOfWork,
    presence: PresenceLookup,
    *,
    origin: Connection | None = None,
    clock: Clock = _system_clock,
) -> DirectMessage:
    """Persist a DM, echo it to the sender, deliver it to the receiver, maybe notify.

    `origin` is the sender's own socket; it receives the echo even if the
    registry now routes the sender to a newer connection.
    """
    text = normalize_text(dto.text)
    image_ref = normalize_image_ref(dto.image_ref)
    if text is None and image_ref is None:
        raise EmptyMessageError()
    if dto.receiver_id == principal.user_id:
        raise ValidationError("Cannot send a direct message to yourself")

    sender = await uow.users.get_by_id(principal.user_id)
    if sender is None:
        raise NotFoundError("User not found")
    receiver = await uow.users.get_by_id(dto.receiver_id)
    if receiver is None:
        raise NotFoundError("Receiver not found")

    message = await uow.direct_messages_w.create(
        DirectMessage(
            id=uuid.uuid4(),
            sender_id=sender.id,
            receiver_id=receiver.id,
            text=text,
            image_ref=image_ref,
            read=False,
            created_at=clock.now(),
        )
    )
    await uow.commit()
    logger.info("DM %s persisted: %s -> %s", message.id, sender.id, receiver.id)

    payload = direct_message_payload(message, sender)

    echo_to = origin or presence.lookup(sender.id)
    if echo_to is not None:
        await deliver(echo_to, "receive-dm", payload)

    receiver_connection = presence.lookup(receiver.id)
    if receiver_connection is not None:
        await deliver(receiver_connection, "receive-dm", payload)

    if receiver_connection is not None and receiver_connection.view.is_viewing_dm(sender.id):
        return message

    try:
        await _notify_receiver(message, sender, receiver, receiver_connection, uow, clock)
    except Exception:
        logger.exception("DM notification for message %s failed", message.id)
        await uow.rollback()

    return message


async def _notify_receiver(
    message: DirectMessage,
    sender: Identity,
    receiver: Identity,
    receiver_connection: Connection | None,
    uow: UnitOfWork,
    clock: Clock,
) -> None:
    unread_count = await unread_service.dm_unread(receiver.id, sender.id, uow)
    title, body = notification_service.dm_notification_text(sender, message.text)
    notification = await notification_service.create_notification(
        uow,
        recipient_id=receiver.id,
        ntype=NotificationType.DM,
        title=title,
        body=body,
        sender=sender,
        clock=clock,
    )
    if receiver_connection is not None:
        await deliver(
            receiver_connection,
            "dm-notification",
            notification_service.notification_payload(
                notification, unread_count=unread_count,
            ),
        )


async def list_conversation(
    peer_id: uuid.UUID,
    principal: Principal,
    limit: int,
    uow: UnitOfWork,
) -> list[DirectMessage]:
    peer = await uow.users.get_by_id(peer_id)
    if peer is None:
        raise NotFoundError("User not found")
    return await uow.direct_messages.list_conversation(
        principal.user_id, peer_id, limit=limit,
    )
