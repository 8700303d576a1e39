from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from teamchat_realtime.api.deps import CurrentPrincipal, UoWDep
from teamchat_realtime.api.v1.schemas.message import (
    ChannelMessagePage,
    ChannelMessageResponse,
    DirectMessageResponse,
)
from teamchat_realtime.config import settings
from teamchat_realtime.infrastructure.db.repositories._cursor import encode_cursor
from teamchat_realtime.services import direct_message_service, message_service

router = APIRouter(prefix="/api/v1", tags=["messages"])


@router.get(
    "/channels/{channel_id}/messages",
    response_model=ChannelMessagePage,
)
async def list_channel_messages(
    channel_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(settings.HISTORY_PAGE_LIMIT, ge=1, le=200),
) -> ChannelMessagePage:
    messages = await message_service.list_channel_messages(
        channel_id, principal, cursor, limit, uow,
    )
    next_cursor = None
    if len(messages) == limit:
        oldest = messages[0]
        next_cursor = encode_cursor(oldest.created_at, oldest.id)
    return ChannelMessagePage(
        items=[ChannelMessageResponse.model_validate(m, from_attributes=True) for m in messages],
        next_cursor=next_cursor,
    )


@router.get("/direct-messages/{peer_id}", response_model=list[DirectMessageResponse])
async def list_direct_messages(
    peer_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(settings.HISTORY_PAGE_LIMIT, ge=1, le=200),
) -> list[DirectMessageResponse]:
    messages = await direct_message_service.list_conversation(
        peer_id, principal, limit, uow,
    )
    return [DirectMessageResponse.model_validate(m, from_attributes=True) for m in messages]
