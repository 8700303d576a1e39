from __future__ import annotations

from contextlib import asynccontextmanager
from types import TracebackType
from typing import AsyncIterator, Self

from sqlalchemy.ext.asyncio import AsyncSession

from teamchat_realtime.infrastructure.db.repositories.direct_message import (
    DirectMessageReaderRepo,
    DirectMessageWriterRepo,
)
from teamchat_realtime.infrastructure.db.repositories.memberships import (
    ChannelReaderRepo,
    MembershipReaderRepo,
)
from teamchat_realtime.infrastructure.db.repositories.message import (
    ChannelMessageReaderRepo,
    ChannelMessageWriterRepo,
)
from teamchat_realtime.infrastructure.db.repositories.notification import (
    NotificationReaderRepo,
    NotificationWriterRepo,
)
from teamchat_realtime.infrastructure.db.repositories.read_state import (
    ReadStateReaderRepo,
    ReadStateWriterRepo,
)
from teamchat_realtime.infrastructure.db.repositories.users import (
    UserReaderRepo,
    UserWriterRepo,
)
from teamchat_realtime.infrastructure.db.session import AsyncSessionLocal


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.users = UserReaderRepo(session)
        self.users_w = UserWriterRepo(session)
        self.memberships = MembershipReaderRepo(session)
        self.channels = ChannelReaderRepo(session)
        self.messages = ChannelMessageReaderRepo(session)
        self.messages_w = ChannelMessageWriterRepo(session)
        self.direct_messages = DirectMessageReaderRepo(session)
        self.direct_messages_w = DirectMessageWriterRepo(session)
        self.read_state = ReadStateReaderRepo(session)
        self.read_state_w = ReadStateWriterRepo(session)
        self.notifications = NotificationReaderRepo(session)
        self.notifications_w = NotificationWriterRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()


@asynccontextmanager
async def sqlalchemy_uow() -> AsyncIterator[SqlAlchemyUoW]:
    """One session per logical action; rolled back if the action raises."""
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow
