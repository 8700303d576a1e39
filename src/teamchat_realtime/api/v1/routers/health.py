from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from teamchat_realtime.infrastructure.db.session import ping_database

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz(request: Request) -> dict[str, str | int]:
    """Liveness plus the number of users routable on this process."""
    return {
        "status": "ok",
        "online_users": request.app.state.registry.online_count(),
    }


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}

    try:
        await ping_database()
        checks["postgres"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["postgres"] = str(exc)

    redis = request.app.state.redis
    if redis is not None:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:  # noqa: BLE001
            checks["redis"] = str(exc)

    ready = all(result == "ok" for result in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "unavailable", "checks": checks},
    )
