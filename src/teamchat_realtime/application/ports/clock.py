from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

# Watermark assumed for a conversation the user has never marked read.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
