from __future__ import annotations

import re
from uuid import UUID

from teamchat_realtime.application.uow import UnitOfWork

MENTION_PATTERN = re.compile(r"@(\w+)")


def detect_mentions(text: str | None) -> set[str]:
    """Return the distinct `@token` names in `text` (without the `@`)."""
    if not text:
        return set()
    return set(MENTION_PATTERN.findall(text))


async def resolve_mentions(
    tokens: set[str],
    team_id: UUID,
    uow: UnitOfWork,
) -> set[UUID]:
    """Map tokens to user ids of members of `team_id`.

    Usernames compare case-insensitively. Tokens naming nobody in the team are
    dropped.
    """
    if not tokens:
        return set()

    members = await uow.memberships.list_team_members(team_id)
    identities = await uow.users.get_many([m.user_id for m in members])
    by_name = {identity.username.casefold(): identity.id for identity in identities}

    return {
        by_name[token.casefold()]
        for token in tokens
        if token.casefold() in by_name
    }
