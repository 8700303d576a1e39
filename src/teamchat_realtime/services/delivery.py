from __future__ import annotations

import logging
from typing import Any

from teamchat_realtime.application.exceptions import DeliveryFailure
from teamchat_realtime.application.ports.presence import Connection

logger = logging.getLogger(__name__)


async def deliver(connection: Connection, event_type: str, data: dict[str, Any]) -> bool:
    """Push one event; a failed push is logged and reported as False, never raised.

    Anything already persisted will be picked up by the client on its next
    fetch or reconnect, so delivery is not retried.
    """
    try:
        await connection.send(event_type, data)
    except DeliveryFailure as exc:
        logger.warning("Delivery failed: %s", exc.detail)
        return False
    return True
