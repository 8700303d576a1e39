from __future__ import annotations

import pytest

from teamchat_realtime.services.mention_service import detect_mentions, resolve_mentions
from tests.conftest import FakeUoW


def test_detect_mentions_distinct_tokens():
    assert detect_mentions("hey @bob and @carol, also @bob again") == {"bob", "carol"}


def test_detect_mentions_stops_at_punctuation():
    assert detect_mentions("@bob, @carol! (@dave)") == {"bob", "carol", "dave"}


def test_detect_mentions_none_or_plain_text():
    assert detect_mentions(None) == set()
    assert detect_mentions("") == set()
    assert detect_mentions("mail me at nobody @ all") == set()


@pytest.mark.asyncio
async def test_resolve_mentions_case_insensitive():
    uow = FakeUoW()
    bob = uow.add_user("Bob")
    team_id = uow.add_team(bob)

    assert await resolve_mentions({"bob"}, team_id, uow) == {bob.id}


@pytest.mark.asyncio
async def test_resolve_mentions_ignores_unknown_and_outsiders():
    uow = FakeUoW()
    bob = uow.add_user("bob")
    outsider = uow.add_user("eve")
    team_id = uow.add_team(bob)
    uow.add_team(outsider)

    resolved = await resolve_mentions({"bob", "eve", "nobody"}, team_id, uow)

    assert resolved == {bob.id}


@pytest.mark.asyncio
async def test_resolve_mentions_empty():
    uow = FakeUoW()
    team_id = uow.add_team(uow.add_user("bob"))
    assert await resolve_mentions(set(), team_id, uow) == set()
