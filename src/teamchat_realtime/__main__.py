"""Entrypoint: python -m teamchat_realtime"""
from __future__ import annotations

import uvicorn

from teamchat_realtime.config import settings
from teamchat_realtime.log_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "teamchat_realtime.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
