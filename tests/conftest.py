"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import dataclasses
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import pytest

from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.exceptions import DeliveryFailure
from teamchat_realtime.domain.entities.channel import ChannelRef
from teamchat_realtime.domain.entities.direct_message import DirectMessage
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.entities.membership import Membership
from teamchat_realtime.domain.entities.message import ChannelMessage
from teamchat_realtime.domain.entities.notification import Notification
from teamchat_realtime.domain.entities.read_watermark import (
    ChannelReadWatermark,
    DMReadWatermark,
)
from teamchat_realtime.domain.value_objects.enums import NotificationType, UserStatus
from teamchat_realtime.domain.value_objects.view_state import ViewState
from teamchat_realtime.infrastructure.db.repositories._cursor import decode_cursor

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Advances one second on every read so successive events are ordered."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self._now = start

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


def make_identity(username: str, *, user_id: UUID | None = None) -> Identity:
    return Identity(id=user_id or uuid.uuid4(), username=username)


def make_channel_message(
    channel: ChannelRef,
    author_id: UUID,
    *,
    text: str | None = "hello",
    created_at: datetime = BASE_TIME,
) -> ChannelMessage:
    return ChannelMessage(
        id=uuid.uuid4(),
        channel_id=channel.id,
        team_id=channel.team_id,
        author_id=author_id,
        text=text,
        image_ref=None,
        created_at=created_at,
    )


def make_direct_message(
    sender_id: UUID,
    receiver_id: UUID,
    *,
    text: str | None = "hey",
    created_at: datetime = BASE_TIME,
    read: bool = False,
) -> DirectMessage:
    return DirectMessage(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        text=text,
        image_ref=None,
        read=read,
        created_at=created_at,
    )


def make_notification(
    recipient_id: UUID,
    sender: Identity,
    *,
    ntype: NotificationType = NotificationType.DM,
    created_at: datetime = BASE_TIME,
) -> Notification:
    return Notification(
        id=uuid.uuid4(),
        user_id=recipient_id,
        type=ntype,
        title=f"New message from {sender.username}",
        body="hey",
        from_user_id=sender.id,
        from_username=sender.username,
        created_at=created_at,
    )


@dataclass
class FakeUserReader:
    _users: dict[UUID, Identity] = field(default_factory=dict)

    async def get_by_id(self, user_id: UUID) -> Identity | None:
        return self._users.get(user_id)

    async def get_many(self, user_ids: list[UUID]) -> list[Identity]:
        return [self._users[uid] for uid in user_ids if uid in self._users]


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader
    _statuses: list[tuple[UUID, UserStatus]] = field(default_factory=list)
    fail: bool = False
    # Yield to the loop before recording, like a real round-trip.
    suspend: bool = False

    async def set_status(self, user_id: UUID, status: UserStatus) -> None:
        if self.fail:
            raise RuntimeError("database unavailable")
        if self.suspend:
            await asyncio.sleep(0)
        self._statuses.append((user_id, status))
        identity = self._reader._users.get(user_id)
        if identity is not None:
            self._reader._users[user_id] = dataclasses.replace(identity, status=status)


@dataclass
class FakeMembershipReader:
    _members: list[Membership] = field(default_factory=list)

    async def is_team_member(self, team_id: UUID, user_id: UUID) -> bool:
        return any(m.team_id == team_id and m.user_id == user_id for m in self._members)

    async def list_team_members(self, team_id: UUID) -> list[Membership]:
        return [m for m in self._members if m.team_id == team_id]

    async def list_team_ids_for_user(self, user_id: UUID) -> list[UUID]:
        return [m.team_id for m in self._members if m.user_id == user_id]


@dataclass
class FakeChannelReader:
    _store: dict[UUID, ChannelRef] = field(default_factory=dict)

    async def get_by_id(self, channel_id: UUID) -> ChannelRef | None:
        return self._store.get(channel_id)

    async def list_for_teams(self, team_ids: list[UUID]) -> list[ChannelRef]:
        return [c for c in self._store.values() if c.team_id in team_ids]


@dataclass
class FakeChannelMessageReader:
    _messages: list[ChannelMessage] = field(default_factory=list)

    async def list_messages(
        self,
        channel_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 100,
    ) -> list[ChannelMessage]:
        rows = sorted(
            (m for m in self._messages if m.channel_id == channel_id),
            key=lambda m: (m.created_at, m.id),
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            rows = [m for m in rows if (m.created_at, m.id) < (ts, mid)]
        return rows[-limit:]

    async def count_after(
        self,
        channel_id: UUID,
        after: datetime,
        *,
        exclude_author_id: UUID,
    ) -> int:
        return sum(
            1
            for m in self._messages
            if m.channel_id == channel_id
            and m.created_at > after
            and m.author_id != exclude_author_id
        )


@dataclass
class FakeChannelMessageWriter:
    _reader: FakeChannelMessageReader
    fail: bool = False

    async def create(self, message: ChannelMessage) -> ChannelMessage:
        if self.fail:
            raise RuntimeError("database unavailable")
        self._reader._messages.append(message)
        return message


@dataclass
class FakeDirectMessageReader:
    _messages: list[DirectMessage] = field(default_factory=list)

    async def list_conversation(
        self, user_id: UUID, peer_id: UUID, *, limit: int = 100
    ) -> list[DirectMessage]:
        pair = {user_id, peer_id}
        rows = sorted(
            (m for m in self._messages if {m.sender_id, m.receiver_id} == pair),
            key=lambda m: m.created_at,
        )
        return rows[-limit:]

    async def count_from_after(
        self, sender_id: UUID, receiver_id: UUID, after: datetime
    ) -> int:
        return sum(
            1
            for m in self._messages
            if m.sender_id == sender_id
            and m.receiver_id == receiver_id
            and m.created_at > after
        )

    async def list_sender_ids_to(self, receiver_id: UUID) -> list[UUID]:
        return list(dict.fromkeys(
            m.sender_id for m in self._messages if m.receiver_id == receiver_id
        ))


@dataclass
class FakeDirectMessageWriter:
    _reader: FakeDirectMessageReader
    fail: bool = False

    async def create(self, message: DirectMessage) -> DirectMessage:
        if self.fail:
            raise RuntimeError("database unavailable")
        self._reader._messages.append(message)
        return message

    async def mark_read(
        self, sender_id: UUID, receiver_id: UUID, up_to: datetime
    ) -> int:
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if (
                m.sender_id == sender_id
                and m.receiver_id == receiver_id
                and m.created_at <= up_to
                and not m.read
            ):
                self._reader._messages[i] = dataclasses.replace(m, read=True)
                updated += 1
        return updated


@dataclass
class FakeReadStateReader:
    _channel: dict[tuple[UUID, UUID], ChannelReadWatermark] = field(default_factory=dict)
    _dm: dict[tuple[UUID, UUID], DMReadWatermark] = field(default_factory=dict)

    async def get_channel_watermark(
        self, user_id: UUID, channel_id: UUID
    ) -> ChannelReadWatermark | None:
        return self._channel.get((user_id, channel_id))

    async def get_dm_watermark(
        self, user_id: UUID, other_user_id: UUID
    ) -> DMReadWatermark | None:
        return self._dm.get((user_id, other_user_id))


@dataclass
class FakeReadStateWriter:
    _reader: FakeReadStateReader

    async def upsert_channel_read(
        self, user_id: UUID, channel_id: UUID, read_at: datetime
    ) -> ChannelReadWatermark:
        key = (user_id, channel_id)
        existing = self._reader._channel.get(key)
        if existing is not None:
            read_at = max(existing.last_read_at, read_at)
        watermark = ChannelReadWatermark(user_id, channel_id, read_at)
        self._reader._channel[key] = watermark
        return watermark

    async def upsert_dm_read(
        self, user_id: UUID, other_user_id: UUID, read_at: datetime
    ) -> DMReadWatermark:
        key = (user_id, other_user_id)
        existing = self._reader._dm.get(key)
        if existing is not None:
            read_at = max(existing.last_read_at, read_at)
        watermark = DMReadWatermark(user_id, other_user_id, read_at)
        self._reader._dm[key] = watermark
        return watermark


@dataclass
class FakeNotificationReader:
    _items: list[Notification] = field(default_factory=list)

    async def list_for_user(
        self, user_id: UUID, *, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]:
        rows = [
            n for n in self._items
            if n.user_id == user_id and not (unread_only and n.read)
        ]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows[:limit]

    def for_user(self, user_id: UUID) -> list[Notification]:
        return [n for n in self._items if n.user_id == user_id]


@dataclass
class FakeNotificationWriter:
    _reader: FakeNotificationReader
    fail_for: set[UUID] = field(default_factory=set)

    async def create(self, notification: Notification) -> Notification:
        if notification.user_id in self.fail_for:
            raise RuntimeError("insert failed")
        self._reader._items.append(notification)
        return notification

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        for i, n in enumerate(self._reader._items):
            if n.id == notification_id and n.user_id == user_id:
                self._reader._items[i] = dataclasses.replace(n, read=True)
                return True
        return False


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    memberships: FakeMembershipReader = field(default_factory=FakeMembershipReader)
    channels: FakeChannelReader = field(default_factory=FakeChannelReader)
    messages: FakeChannelMessageReader = field(default_factory=FakeChannelMessageReader)
    messages_w: FakeChannelMessageWriter | None = None
    direct_messages: FakeDirectMessageReader = field(default_factory=FakeDirectMessageReader)
    direct_messages_w: FakeDirectMessageWriter | None = None
    read_state: FakeReadStateReader = field(default_factory=FakeReadStateReader)
    read_state_w: FakeReadStateWriter | None = None
    notifications: FakeNotificationReader = field(default_factory=FakeNotificationReader)
    notifications_w: FakeNotificationWriter | None = None
    _commits: int = 0
    _rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeChannelMessageWriter(self.messages)
        if self.direct_messages_w is None:
            self.direct_messages_w = FakeDirectMessageWriter(self.direct_messages)
        if self.read_state_w is None:
            self.read_state_w = FakeReadStateWriter(self.read_state)
        if self.notifications_w is None:
            self.notifications_w = FakeNotificationWriter(self.notifications)

    @property
    def _committed(self) -> bool:
        return self._commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._commits += 1

    async def rollback(self) -> None:
        self._rollbacks += 1

    def add_user(self, username: str) -> Identity:
        identity = make_identity(username)
        self.users._users[identity.id] = identity
        return identity

    def add_team(self, *members: Identity) -> UUID:
        team_id = uuid.uuid4()
        for identity in members:
            self.memberships._members.append(Membership(team_id=team_id, user_id=identity.id))
        return team_id

    def add_channel(self, team_id: UUID, name: str = "general") -> ChannelRef:
        channel = ChannelRef(id=uuid.uuid4(), team_id=team_id, name=name)
        self.channels._store[channel.id] = channel
        return channel


def fake_uow_factory(uow: FakeUoW):
    """Mimics `sqlalchemy_uow`: every call hands out the same in-memory UoW."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return _factory


@dataclass(eq=False)
class FakeConnection:
    """Records every pushed event; `fail=True` simulates a dead socket."""
    user_id: UUID
    username: str
    view: ViewState = field(default_factory=ViewState)
    sent: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    async def send(self, event_type: str, data: dict[str, Any]) -> None:
        if self.fail:
            raise DeliveryFailure(f"{event_type} to user {self.user_id} failed: closed")
        self.sent.append((event_type, data))

    def events(self, event_type: str) -> list[dict[str, Any]]:
        return [data for etype, data in self.sent if etype == event_type]


def connection_for(identity: Identity, **kwargs: Any) -> FakeConnection:
    return FakeConnection(user_id=identity.id, username=identity.username, **kwargs)


@dataclass
class FakePublisher:
    _events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("bus down")
        self._events.append((event_type, payload))


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


def principal_of(identity: Identity) -> Principal:
    return Principal(user_id=identity.id)
