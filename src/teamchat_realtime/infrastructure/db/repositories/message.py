from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.domain.entities.message import ChannelMessage
from teamchat_realtime.infrastructure.db.mappers import message as mapper
from teamchat_realtime.infrastructure.db.models.message import ChannelMessageModel
from teamchat_realtime.infrastructure.db.repositories._cursor import decode_cursor


class ChannelMessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(
        self,
        channel_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[ChannelMessage]:
        stmt = (
            select(ChannelMessageModel)
            .where(ChannelMessageModel.channel_id == channel_id)
            .order_by(ChannelMessageModel.created_at.desc(), ChannelMessageModel.id.desc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (ChannelMessageModel.created_at < ts)
                | ((ChannelMessageModel.created_at == ts) & (ChannelMessageModel.id < mid))
            )
        result = await self._session.execute(stmt)
        newest_first = [mapper.model_to_entity(m) for m in result.scalars().all()]
        return list(reversed(newest_first))

    async def count_after(
        self,
        channel_id: UUID,
        after: datetime,
        *,
        exclude_author_id: UUID,
    ) -> int:
        stmt = select(func.count(ChannelMessageModel.id)).where(
            ChannelMessageModel.channel_id == channel_id,
            ChannelMessageModel.created_at > after,
            ChannelMessageModel.author_id != exclude_author_id,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class ChannelMessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: ChannelMessage) -> ChannelMessage:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
