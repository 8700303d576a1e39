"""Connection lifecycle: authenticate, go online, go offline."""
from __future__ import annotations

import logging

from teamchat_realtime.application.exceptions import AuthError
from teamchat_realtime.application.ports.auth import TokenVerifier
from teamchat_realtime.application.ports.bus import EventPublisher
from teamchat_realtime.application.ports.presence import Connection, ConnectionRegistry
from teamchat_realtime.application.uow import UnitOfWork
from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.events.presence_changed import PresenceChanged
from teamchat_realtime.domain.value_objects.enums import UserStatus

logger = logging.getLogger(__name__)

STATUS_EVENT = "user-status-changed"


async def authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow: UnitOfWork,
) -> Identity:
    if not token:
        raise AuthError(AuthError.MISSING_CREDENTIAL)
    try:
        principal = await verifier.verify(token)
    except Exception as exc:
        raise AuthError(AuthError.INVALID_CREDENTIAL, str(exc)) from exc

    identity = await uow.users.get_by_id(principal.user_id)
    if identity is None:
        raise AuthError(AuthError.UNKNOWN_USER)
    return identity


async def connect(
    connection: Connection,
    registry: ConnectionRegistry,
    uow: UnitOfWork,
    publisher: EventPublisher,
) -> PresenceChanged:
    """Make the connection routable, mark the user online, announce it.

    Registration happens before any await so a concurrent close of an older
    socket of the same user already sees itself superseded.
    """
    registry.register(connection)
    await _persist_status(uow, connection, UserStatus.ONLINE)
    event = PresenceChanged(connection.user_id, connection.username, UserStatus.ONLINE)
    await _publish(publisher, event)
    logger.info("User %s online", connection.user_id)
    return event


async def disconnect(
    connection: Connection,
    registry: ConnectionRegistry,
    uow: UnitOfWork,
    publisher: EventPublisher,
) -> PresenceChanged | None:
    """Tear down a closed connection.

    Returns None when a newer connection of the same user holds the registry
    slot, either already or by the time the offline write finishes; that user
    is still online and nothing is announced.
    """
    connection.view.clear()
    if not registry.unregister(connection):
        logger.info("Superseded connection of user %s closed", connection.user_id)
        return None

    await _persist_status(uow, connection, UserStatus.OFFLINE)
    if registry.is_online(connection.user_id):
        logger.info("User %s reconnected during teardown", connection.user_id)
        await _persist_status(uow, connection, UserStatus.ONLINE)
        return None

    event = PresenceChanged(connection.user_id, connection.username, UserStatus.OFFLINE)
    await _publish(publisher, event)
    logger.info("User %s offline", connection.user_id)
    return event


async def _persist_status(
    uow: UnitOfWork,
    connection: Connection,
    status: UserStatus,
) -> None:
    # Best-effort: the connection lifecycle proceeds even if the write fails.
    try:
        await uow.users_w.set_status(connection.user_id, status)
        await uow.commit()
    except Exception:
        logger.exception(
            "Failed to persist status=%s for user %s", status, connection.user_id,
        )


async def _publish(publisher: EventPublisher, event: PresenceChanged) -> None:
    try:
        await publisher.publish(STATUS_EVENT, event.to_payload())
    except Exception:
        logger.exception("Failed to publish presence change for user %s", event.user_id)
