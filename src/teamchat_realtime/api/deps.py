"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.application.ports.auth import TokenVerifier
from teamchat_realtime.application.uow import UnitOfWork, UoWFactory
from teamchat_realtime.config import settings
from teamchat_realtime.infrastructure.auth.hs256_verifier import HS256Verifier
from teamchat_realtime.infrastructure.auth.jwks_verifier import JWKSVerifier
from teamchat_realtime.infrastructure.db.uow import sqlalchemy_uow

_bearer_scheme = HTTPBearer()


def get_uow_factory() -> UoWFactory:
    """WebSocket handlers open one unit of work per inbound event."""
    return sqlalchemy_uow


async def get_uow(
    factory: Annotated[UoWFactory, Depends(get_uow_factory)],
) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
