from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.domain.entities.read_watermark import (
    ChannelReadWatermark,
    DMReadWatermark,
)
from teamchat_realtime.infrastructure.db.models.read_state import ChannelReadModel, DMReadModel


class ReadStateReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_channel_watermark(
        self,
        user_id: UUID,
        channel_id: UUID,
    ) -> ChannelReadWatermark | None:
        stmt = select(ChannelReadModel.last_read_at).where(
            ChannelReadModel.user_id == user_id,
            ChannelReadModel.channel_id == channel_id,
        )
        result = await self._session.execute(stmt)
        last_read_at = result.scalar_one_or_none()
        if last_read_at is None:
            return None
        return ChannelReadWatermark(user_id, channel_id, last_read_at)

    async def get_dm_watermark(
        self,
        user_id: UUID,
        other_user_id: UUID,
    ) -> DMReadWatermark | None:
        stmt = select(DMReadModel.last_read_at).where(
            DMReadModel.user_id == user_id,
            DMReadModel.other_user_id == other_user_id,
        )
        result = await self._session.execute(stmt)
        last_read_at = result.scalar_one_or_none()
        if last_read_at is None:
            return None
        return DMReadWatermark(user_id, other_user_id, last_read_at)


class ReadStateWriterRepo:
    """Single-statement upserts; GREATEST keeps watermarks monotonic."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_channel_read(
        self,
        user_id: UUID,
        channel_id: UUID,
        read_at: datetime,
    ) -> ChannelReadWatermark:
        stmt = pg_insert(ChannelReadModel).values(
            user_id=user_id,
            channel_id=channel_id,
            last_read_at=read_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_channel_read_member",
            set_={
                "last_read_at": func.greatest(
                    ChannelReadModel.last_read_at, stmt.excluded.last_read_at
                )
            },
        ).returning(ChannelReadModel.last_read_at)
        result = await self._session.execute(stmt)
        return ChannelReadWatermark(user_id, channel_id, result.scalar_one())

    async def upsert_dm_read(
        self,
        user_id: UUID,
        other_user_id: UUID,
        read_at: datetime,
    ) -> DMReadWatermark:
        stmt = pg_insert(DMReadModel).values(
            user_id=user_id,
            other_user_id=other_user_id,
            last_read_at=read_at,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_dm_read_pair",
            set_={
                "last_read_at": func.greatest(
                    DMReadModel.last_read_at, stmt.excluded.last_read_at
                )
            },
        ).returning(DMReadModel.last_read_at)
        result = await self._session.execute(stmt)
        return DMReadWatermark(user_id, other_user_id, result.scalar_one())
