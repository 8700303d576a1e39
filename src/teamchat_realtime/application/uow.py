from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from teamchat_realtime.application.repositories.channels import ChannelReader
from teamchat_realtime.application.repositories.direct_message import (
    DirectMessageReader,
    DirectMessageWriter,
)
from teamchat_realtime.application.repositories.memberships import MembershipReader
from teamchat_realtime.application.repositories.message import (
    ChannelMessageReader,
    ChannelMessageWriter,
)
from teamchat_realtime.application.repositories.notification import (
    NotificationReader,
    NotificationWriter,
)
from teamchat_realtime.application.repositories.read_state import (
    ReadStateReader,
    ReadStateWriter,
)
from teamchat_realtime.application.repositories.users import UserReader, UserWriter


class UnitOfWork(Protocol):
    users: UserReader
    users_w: UserWriter
    memberships: MembershipReader
    channels: ChannelReader
    messages: ChannelMessageReader
    messages_w: ChannelMessageWriter
    direct_messages: DirectMessageReader
    direct_messages_w: DirectMessageWriter
    read_state: ReadStateReader
    read_state_w: ReadStateWriter
    notifications: NotificationReader
    notifications_w: NotificationWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
