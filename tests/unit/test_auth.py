from __future__ import annotations

import uuid

import jwt
import pytest

from teamchat_realtime.application.dto.principal import Principal
from teamchat_realtime.infrastructure.auth.claims import principal_from_claims
from teamchat_realtime.infrastructure.auth.hs256_verifier import HS256Verifier


def test_principal_from_sub():
    user_id = uuid.uuid4()
    assert principal_from_claims({"sub": str(user_id)}) == Principal(user_id=user_id)


def test_principal_from_legacy_id_claim():
    user_id = uuid.uuid4()
    assert principal_from_claims({"id": str(user_id)}).user_id == user_id


def test_principal_requires_subject():
    with pytest.raises(jwt.InvalidTokenError):
        principal_from_claims({"name": "alice"})


def test_principal_rejects_non_uuid_subject():
    with pytest.raises(jwt.InvalidTokenError):
        principal_from_claims({"sub": "42"})


@pytest.mark.asyncio
async def test_hs256_verifier_accepts_valid_token():
    user_id = uuid.uuid4()
    token = jwt.encode({"sub": str(user_id)}, "s3cret", algorithm="HS256")

    principal = await HS256Verifier("s3cret").verify(token)

    assert principal.user_id == user_id


@pytest.mark.asyncio
async def test_hs256_verifier_rejects_wrong_secret():
    token = jwt.encode({"sub": str(uuid.uuid4())}, "other", algorithm="HS256")
    with pytest.raises(jwt.InvalidSignatureError):
        await HS256Verifier("s3cret").verify(token)
