from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from teamchat_realtime.api.deps import get_uow_factory, get_verifier
from teamchat_realtime.api.middleware.correlation_id import correlation_id_ctx
from teamchat_realtime.application.dto.message import (
    SendChannelMessageDTO,
    SendDirectMessageDTO,
)
from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.exceptions import AppError, AuthError
from teamchat_realtime.application.policies.permissions import assert_channel_access
from teamchat_realtime.application.ports.auth import TokenVerifier
from teamchat_realtime.application.ports.bus import EventPublisher
from teamchat_realtime.application.uow import UoWFactory
from teamchat_realtime.config import settings
from teamchat_realtime.domain.value_objects.enums import UnreadKind
from teamchat_realtime.infrastructure.ws.connection import WsConnection
from teamchat_realtime.infrastructure.ws.protocol import (
    ChannelPayload,
    MarkChannelReadPayload,
    MarkDMReadPayload,
    SendDMPayload,
    SendMessagePayload,
    TypingPayload,
    ViewChannelPayload,
    ViewDMPayload,
    WsInbound,
)
from teamchat_realtime.infrastructure.ws.registry import PresenceRegistry
from teamchat_realtime.services import (
    direct_message_service,
    message_service,
    presence_service,
    typing_service,
    unread_service,
)
from teamchat_realtime.services.delivery import deliver

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


@dataclass(slots=True)
class _Session:
    """Everything one connection task needs; never shared with other tasks."""

    connection: WsConnection
    principal: Principal
    registry: PresenceRegistry
    uow_factory: UoWFactory


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
    verifier: TokenVerifier = Depends(get_verifier),
    uow_factory: UoWFactory = Depends(get_uow_factory),
) -> None:
    registry: PresenceRegistry = websocket.app.state.registry
    publisher: EventPublisher = websocket.app.state.publisher

    try:
        async with uow_factory() as uow:
            identity = await presence_service.authenticate(token, verifier, uow)
    except AuthError as exc:
        logger.info("WS auth rejected: %s", exc.reason)
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=exc.reason)
        return

    await websocket.accept()
    connection = WsConnection(websocket, identity)
    cid_token = correlation_id_ctx.set(connection.id)

    async with uow_factory() as uow:
        await presence_service.connect(connection, registry, uow, publisher)

    session = _Session(
        connection=connection,
        principal=Principal(user_id=identity.id),
        registry=registry,
        uow_factory=uow_factory,
    )
    heartbeat_task = asyncio.create_task(
        _heartbeat(connection), name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, session)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for user %s", identity.id)
    finally:
        heartbeat_task.cancel()
        async with uow_factory() as uow:
            await presence_service.disconnect(connection, registry, uow, publisher)
        correlation_id_ctx.reset(cid_token)


async def _heartbeat(connection: WsConnection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        if not await deliver(connection, "pong", {}):
            return


async def _read_loop(ws: WebSocket, session: _Session) -> None:
    connection = session.connection
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PayloadError:
            await deliver(connection, "error", {"code": "invalid_payload"})
            continue

        handler = _HANDLERS.get(msg.type)
        if handler is None:
            await deliver(connection, "error", {"code": "unknown_type", "action": msg.type})
            continue

        try:
            await handler(session, msg.data)
        except PayloadError as exc:
            await _send_error(session, msg.type, "invalid_input", str(exc))
        except AppError as exc:
            await _send_error(session, msg.type, exc.code, exc.detail)
        except Exception:
            logger.exception("WS action %s failed for user %s", msg.type, connection.user_id)
            await _send_error(session, msg.type, "send_failed", "Action failed, please retry")


async def _send_error(session: _Session, action: str, code: str, detail: str) -> None:
    await deliver(
        session.connection,
        "error",
        {"code": code, "detail": detail, "action": action},
    )


async def _handle_ping(session: _Session, data: dict[str, Any]) -> None:
    await deliver(session.connection, "pong", {})


async def _handle_join_channel(session: _Session, data: dict[str, Any]) -> None:
    payload = ChannelPayload.model_validate(data)
    async with session.uow_factory() as uow:
        await assert_channel_access(
            payload.channel_id, session.principal.user_id, uow.channels, uow.memberships,
        )
    session.registry.join(payload.channel_id, session.connection)
    await deliver(session.connection, "channel-joined", {"channel_id": str(payload.channel_id)})


async def _handle_leave_channel(session: _Session, data: dict[str, Any]) -> None:
    payload = ChannelPayload.model_validate(data)
    session.registry.leave(payload.channel_id, session.connection)
    await deliver(session.connection, "channel-left", {"channel_id": str(payload.channel_id)})


async def _handle_view_channel(session: _Session, data: dict[str, Any]) -> None:
    payload = ViewChannelPayload.model_validate(data)
    session.connection.view.set_viewing_channel(payload.channel_id)


async def _handle_view_dm(session: _Session, data: dict[str, Any]) -> None:
    payload = ViewDMPayload.model_validate(data)
    session.connection.view.set_viewing_dm(payload.peer_id)


async def _handle_send_message(session: _Session, data: dict[str, Any]) -> None:
    payload = SendMessagePayload.model_validate(data)
    dto = SendChannelMessageDTO(
        channel_id=payload.channel_id,
        team_id=payload.team_id,
        text=payload.text,
        image_ref=payload.image_ref,
    )
    async with session.uow_factory() as uow:
        await message_service.send_channel_message(
            session.principal, dto, uow, session.registry, origin=session.connection,
        )


async def _handle_send_dm(session: _Session, data: dict[str, Any]) -> None:
    payload = SendDMPayload.model_validate(data)
    dto = SendDirectMessageDTO(
        receiver_id=payload.receiver_id,
        text=payload.text,
        image_ref=payload.image_ref,
    )
    async with session.uow_factory() as uow:
        await direct_message_service.send_direct_message(
            session.principal, dto, uow, session.registry, origin=session.connection,
        )


async def _handle_mark_channel_read(session: _Session, data: dict[str, Any]) -> None:
    payload = MarkChannelReadPayload.model_validate(data)
    async with session.uow_factory() as uow:
        count = await unread_service.mark_channel_read(
            payload.channel_id, session.principal, uow, read_at=payload.read_at,
        )
    await deliver(
        session.connection,
        "unread-updated",
        {"type": UnreadKind.CHANNEL.value, "id": str(payload.channel_id), "count": count},
    )


async def _handle_mark_dm_read(session: _Session, data: dict[str, Any]) -> None:
    payload = MarkDMReadPayload.model_validate(data)
    async with session.uow_factory() as uow:
        count = await unread_service.mark_dm_read(
            payload.peer_id, session.principal, uow, read_at=payload.read_at,
        )
    await deliver(
        session.connection,
        "unread-updated",
        {"type": UnreadKind.DM.value, "id": str(payload.peer_id), "count": count},
    )


async def _handle_get_unread_counts(session: _Session, data: dict[str, Any]) -> None:
    async with session.uow_factory() as uow:
        counts = await unread_service.all_unread_counts(session.principal, uow)
    await deliver(session.connection, "all-unread-counts", counts.to_payload())


async def _handle_typing_start(session: _Session, data: dict[str, Any]) -> None:
    await _relay_typing(session, data, started=True)


async def _handle_typing_stop(session: _Session, data: dict[str, Any]) -> None:
    await _relay_typing(session, data, started=False)


async def _relay_typing(session: _Session, data: dict[str, Any], *, started: bool) -> None:
    payload = TypingPayload.model_validate(data)
    await typing_service.relay_typing(
        session.connection,
        session.registry,
        started=started,
        channel_id=payload.channel_id,
        target_user_id=payload.target_user_id,
    )


_HANDLERS = {
    "ping": _handle_ping,
    "join-channel": _handle_join_channel,
    "leave-channel": _handle_leave_channel,
    "view-channel": _handle_view_channel,
    "view-dm": _handle_view_dm,
    "send-message": _handle_send_message,
    "send-dm": _handle_send_dm,
    "mark-channel-read": _handle_mark_channel_read,
    "mark-dm-read": _handle_mark_dm_read,
    "get-unread-counts": _handle_get_unread_counts,
    "typing-start": _handle_typing_start,
    "typing-stop": _handle_typing_stop,
}
