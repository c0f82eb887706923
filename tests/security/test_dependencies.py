"""Tests for authentication dependencies"""
from datetime import datetime, timedelta, UTC

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from mamae_review.core.config import config
from mamae_review.security import decode_token, get_current_user, get_optional_user


def _token(claims):
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def _credentials(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestDecodeToken:

    def test_valid_token(self):
        user = decode_token(_token({"sub": "u1", "name": "Ana"}))

        assert user.user_id == "u1"
        assert user.name == "Ana"

    def test_expired_token(self):
        token = _token({"sub": "u1", "exp": datetime.now(UTC) - timedelta(minutes=1)})

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "u1"}, "another-secret-that-is-long-enough-x", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.detail == "Could not validate credentials"

    def test_missing_subject(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(_token({"name": "Ana"}))

        assert exc_info.value.status_code == 401


class TestDependencies:

    @pytest.mark.asyncio
    async def test_current_user_requires_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_current_user(self):
        user = await get_current_user(_credentials(_token({"sub": "u1"})))

        assert user.user_id == "u1"
        assert user.name == "Anônimo"

    @pytest.mark.asyncio
    async def test_optional_user_anonymous(self):
        assert await get_optional_user(None) is None

    @pytest.mark.asyncio
    async def test_optional_user_invalid_token(self):
        assert await get_optional_user(_credentials("garbage")) is None
