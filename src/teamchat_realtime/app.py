from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamchat_realtime.api.middleware.correlation_id import CorrelationIdMiddleware
from teamchat_realtime.api.v1.routers import health, messages, notifications, unread, ws
from teamchat_realtime.application.exceptions import (
    AuthError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from teamchat_realtime.config import settings
from teamchat_realtime.infrastructure.bus.memory import InMemoryBroadcaster
from teamchat_realtime.infrastructure.bus.redis_pubsub import RedisBroadcaster
from teamchat_realtime.infrastructure.db.session import dispose_engine
from teamchat_realtime.infrastructure.ws.registry import PresenceRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle: wire the presence broadcast bus."""
    registry: PresenceRegistry = app.state.registry

    broadcaster: InMemoryBroadcaster | RedisBroadcaster
    if settings.BROADCAST_BACKEND == "redis":
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        broadcaster = RedisBroadcaster(
            app.state.redis, settings.REDIS_PUBSUB_CHANNEL, registry.broadcast,
        )
    else:
        broadcaster = InMemoryBroadcaster(registry.broadcast)

    app.state.publisher = broadcaster
    await broadcaster.start()

    yield

    await broadcaster.stop()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Team Chat Realtime Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    # One registry per process, shared by every connection task.
    app.state.registry = PresenceRegistry()
    app.state.redis = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(messages.router)
    app.include_router(notifications.router)
    app.include_router(unread.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(AuthError)
    async def _unauthorized(_req: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.reason})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
