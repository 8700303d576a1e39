"""End-to-end WebSocket flows against the in-process app and in-memory UoW."""
from __future__ import annotations

import uuid
from typing import Any, Callable

import jwt
import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from teamchat_realtime.api.deps import get_uow_factory
from teamchat_realtime.api.v1.routers.ws import AUTH_FAILED_CLOSE_CODE
from teamchat_realtime.app import create_app
from teamchat_realtime.config import settings
from tests.conftest import FakeUoW, fake_uow_factory


def _url(user_id: uuid.UUID) -> str:
    token = jwt.encode({"sub": str(user_id)}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return f"/ws/chat?token={token}"


def _receive_until(
    ws,
    event_type: str,
    where: Callable[[dict[str, Any]], bool] = lambda _data: True,
) -> dict[str, Any]:
    """Skip unrelated pushes (presence broadcasts arrive asynchronously)."""
    while True:
        msg = ws.receive_json()
        if msg["type"] == event_type and where(msg["data"]):
            return msg["data"]


def _ready(ws) -> None:
    # The read loop only starts after registration, so a pong means routable.
    ws.send_json({"type": "ping"})
    _receive_until(ws, "pong")


@pytest.fixture
def app_with_uow():
    app = create_app()
    uow = FakeUoW()
    app.dependency_overrides[get_uow_factory] = lambda: fake_uow_factory(uow)
    return app, uow


@pytest.fixture
def client(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client:
        yield client


@pytest.fixture
def team(app_with_uow):
    _, uow = app_with_uow
    alice = uow.add_user("alice")
    bob = uow.add_user("bob")
    team_id = uow.add_team(alice, bob)
    channel = uow.add_channel(team_id, "general")
    return uow, alice, bob, channel


def test_connect_without_token_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/chat"):
            pass
    assert exc_info.value.code == AUTH_FAILED_CLOSE_CODE


def test_connect_with_unknown_user_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(_url(uuid.uuid4())):
            pass
    assert exc_info.value.code == AUTH_FAILED_CLOSE_CODE


def test_protocol_errors_keep_connection_open(client, team):
    _uow, alice, _bob, channel = team
    with client.websocket_connect(_url(alice.id)) as ws:
        _ready(ws)

        ws.send_text("not json")
        assert _receive_until(ws, "error")["code"] == "invalid_payload"

        ws.send_json({"type": "teleport", "data": {}})
        assert _receive_until(ws, "error")["code"] == "unknown_type"

        ws.send_json({"type": "send-message", "data": {"channel_id": "nope"}})
        assert _receive_until(ws, "error")["code"] == "invalid_input"

        ws.send_json({"type": "send-message", "data": {"channel_id": str(channel.id), "text": "  "}})
        err = _receive_until(ws, "error")
        assert err["code"] == "empty_message"
        assert err["action"] == "send-message"

        _ready(ws)


def test_presence_and_channel_fan_out(client, team):
    uow, alice, bob, channel = team
    with client.websocket_connect(_url(bob.id)) as bob_ws:
        _ready(bob_ws)
        with client.websocket_connect(_url(alice.id)) as alice_ws:
            _ready(alice_ws)
            _receive_until(
                bob_ws, "user-status-changed",
                lambda d: d["user_id"] == str(alice.id) and d["status"] == "online",
            )

            alice_ws.send_json({
                "type": "send-message",
                "data": {"channel_id": str(channel.id), "text": "hi @bob"},
            })

            received = _receive_until(bob_ws, "receive-message")
            assert received["text"] == "hi @bob"
            assert received["username"] == "alice"
            notification = _receive_until(bob_ws, "notification")
            assert notification["type"] == "mention"
            assert notification["unread_count"] == 1
            assert _receive_until(alice_ws, "receive-message")["id"] == received["id"]

            bob_ws.send_json({"type": "mark-channel-read", "data": {"channel_id": str(channel.id)}})
            updated = _receive_until(bob_ws, "unread-updated")
            assert updated == {"type": "channel", "id": str(channel.id), "count": 0}

        _receive_until(
            bob_ws, "user-status-changed",
            lambda d: d["user_id"] == str(alice.id) and d["status"] == "offline",
        )

    assert len(uow.messages._messages) == 1


def test_viewing_channel_suppresses_notification(client, team):
    uow, alice, bob, channel = team
    with client.websocket_connect(_url(bob.id)) as bob_ws:
        bob_ws.send_json({"type": "view-channel", "data": {"channel_id": str(channel.id)}})
        _ready(bob_ws)
        with client.websocket_connect(_url(alice.id)) as alice_ws:
            _ready(alice_ws)
            alice_ws.send_json({
                "type": "send-message",
                "data": {"channel_id": str(channel.id), "text": "standup?"},
            })
            _receive_until(alice_ws, "receive-message")
            _receive_until(bob_ws, "receive-message")

    assert uow.notifications.for_user(bob.id) == []


def test_direct_message_and_unread_counts(client, team):
    _uow, alice, bob, _channel = team
    with client.websocket_connect(_url(bob.id)) as bob_ws:
        _ready(bob_ws)
        with client.websocket_connect(_url(alice.id)) as alice_ws:
            _ready(alice_ws)
            alice_ws.send_json({
                "type": "send-dm",
                "data": {"receiver_id": str(bob.id), "text": "lunch?"},
            })

            echo = _receive_until(alice_ws, "receive-dm")
            delivered = _receive_until(bob_ws, "receive-dm")
            assert echo["id"] == delivered["id"]
            pushed = _receive_until(bob_ws, "dm-notification")
            assert pushed["title"] == "New message from alice"

            bob_ws.send_json({"type": "get-unread-counts"})
            counts = _receive_until(bob_ws, "all-unread-counts")
            assert counts == {"channels": [], "dms": [{"user_id": str(alice.id), "count": 1}]}

            bob_ws.send_json({"type": "mark-dm-read", "data": {"peer_id": str(alice.id)}})
            assert _receive_until(bob_ws, "unread-updated")["count"] == 0


def test_typing_relayed_to_channel_room(client, team):
    _uow, alice, bob, channel = team
    with client.websocket_connect(_url(bob.id)) as bob_ws:
        bob_ws.send_json({"type": "join-channel", "data": {"channel_id": str(channel.id)}})
        _receive_until(bob_ws, "channel-joined")
        with client.websocket_connect(_url(alice.id)) as alice_ws:
            _ready(alice_ws)
            alice_ws.send_json({"type": "typing-start", "data": {"channel_id": str(channel.id)}})
            typing = _receive_until(bob_ws, "user-typing")
            assert typing == {
                "user_id": str(alice.id),
                "username": "alice",
                "channel_id": str(channel.id),
            }


def _types_until_pong(ws) -> list[str]:
    ws.send_json({"type": "ping"})
    seen = []
    while True:
        msg = ws.receive_json()
        if msg["type"] == "pong":
            return seen
        seen.append(msg["type"])


@pytest.mark.parametrize(
    ("action", "writer"),
    [("send-message", "messages_w"), ("send-dm", "direct_messages_w")],
)
def test_storage_failure_reports_send_failed(client, team, action, writer):
    uow, alice, bob, channel = team
    getattr(uow, writer).fail = True
    data = {"channel_id": str(channel.id)} if action == "send-message" else {"receiver_id": str(bob.id)}
    data["text"] = "hello"

    with client.websocket_connect(_url(alice.id)) as ws:
        _ready(ws)
        ws.send_json({"type": action, "data": data})
        err = _receive_until(ws, "error")
        assert err["code"] == "send_failed"
        assert err["action"] == action
        _ready(ws)

    assert uow.messages._messages == []
    assert uow.direct_messages._messages == []


def test_join_channel_outside_team_is_refused(app_with_uow, client, team):
    app, _ = app_with_uow
    uow, _alice, _bob, channel = team
    mallory = uow.add_user("mallory")

    with client.websocket_connect(_url(mallory.id)) as ws:
        ws.send_json({"type": "join-channel", "data": {"channel_id": str(channel.id)}})
        err = _receive_until(ws, "error")
        assert err["code"] == "not_authorized"
        assert err["action"] == "join-channel"
        assert app.state.registry.room_connections(channel.id) == []


def test_leave_channel_acknowledged(app_with_uow, client, team):
    app, _ = app_with_uow
    _uow, _alice, bob, channel = team

    with client.websocket_connect(_url(bob.id)) as ws:
        ws.send_json({"type": "join-channel", "data": {"channel_id": str(channel.id)}})
        _receive_until(ws, "channel-joined")
        assert len(app.state.registry.room_connections(channel.id)) == 1

        ws.send_json({"type": "leave-channel", "data": {"channel_id": str(channel.id)}})
        assert _receive_until(ws, "channel-left") == {"channel_id": str(channel.id)}
        assert app.state.registry.room_connections(channel.id) == []


def test_viewing_dm_suppresses_dm_notification(client, team):
    uow, alice, bob, _channel = team
    with client.websocket_connect(_url(bob.id)) as bob_ws:
        bob_ws.send_json({"type": "view-dm", "data": {"peer_id": str(alice.id)}})
        _ready(bob_ws)
        with client.websocket_connect(_url(alice.id)) as alice_ws:
            _ready(alice_ws)
            alice_ws.send_json({
                "type": "send-dm",
                "data": {"receiver_id": str(bob.id), "text": "you there?"},
            })
            _receive_until(alice_ws, "receive-dm")
            # Actions run one at a time per socket: the send is finished after this.
            _ready(alice_ws)

            _receive_until(bob_ws, "receive-dm")
            assert "dm-notification" not in _types_until_pong(bob_ws)

    assert uow.notifications.for_user(bob.id) == []
