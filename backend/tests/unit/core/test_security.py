"""
Unit Tests for bearer token handling
Tests for: token creation, decoding, claim checks in the auth dependency
"""
import uuid
import pytest
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from chronicle.core.security import create_access_token, decode_token
from chronicle.core.config import settings
from chronicle.modules.auth.dependencies import get_token_payload


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


class TestAccessToken:
    """Test access token creation"""

    def test_create_access_token_with_expiry(self):
        """Test creating access token with custom expiry"""
        token = create_access_token({'sub': 'user123'}, expires_delta=timedelta(hours=1))

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        remaining = (datetime.utcfromtimestamp(payload['exp']) - datetime.utcnow()).total_seconds()

        assert 3500 < remaining < 3700

    def test_access_token_has_type_and_data(self):
        token = create_access_token({'sub': 'user123', 'email': 'test@example.com'})

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload['type'] == 'access'
        assert payload['sub'] == 'user123'
        assert payload['email'] == 'test@example.com'


class TestDecodeToken:
    """Test token decoding"""

    def test_decode_invalid_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token('invalid_token_string')

        assert exc_info.value.status_code == 401
        assert 'Could not validate credentials' in exc_info.value.detail

    def test_decode_expired_token(self):
        expired_token = jwt.encode(
            {'sub': 'user123', 'exp': datetime.utcnow() - timedelta(hours=1), 'type': 'access'},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_token(expired_token)

        assert exc_info.value.status_code == 401

    def test_decode_token_wrong_secret(self):
        token = jwt.encode(
            {'sub': 'user123', 'exp': datetime.utcnow() + timedelta(hours=1)},
            'wrong_secret_key',
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401


class TestTokenPayload:
    """Claim checks done before any profile lookup"""

    @pytest.mark.asyncio
    async def test_valid_token(self):
        account_id = str(uuid.uuid4())
        payload = await get_token_payload(_credentials(create_access_token({'sub': account_id})))

        assert payload['sub'] == account_id

    @pytest.mark.asyncio
    async def test_wrong_type(self):
        token = jwt.encode(
            {'sub': str(uuid.uuid4()), 'exp': datetime.utcnow() + timedelta(hours=1), 'type': 'refresh'},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            await get_token_payload(_credentials(token))

        assert exc_info.value.detail == 'Invalid token type'

    @pytest.mark.asyncio
    async def test_missing_subject(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_token_payload(_credentials(create_access_token({'email': 'a@example.com'})))

        assert exc_info.value.detail == 'Invalid token payload'

    @pytest.mark.asyncio
    async def test_subject_not_a_uuid(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_token_payload(_credentials(create_access_token({'sub': 'user123'})))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == 'Invalid user ID format'
