"""Tests for password hashing and access tokens."""

from datetime import timedelta

import pytest
from freezegun import freeze_time
from jose import jwt

from src.core.config import settings
from src.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


@pytest.mark.unit
def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


@pytest.mark.unit
def test_malformed_hash_does_not_verify():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


@pytest.mark.unit
def test_token_carries_account_id():
    token = create_access_token("account-1")

    assert decode_access_token(token) == "account-1"


@pytest.mark.unit
def test_token_expires():
    with freeze_time("2024-01-01 00:00:00"):
        token = create_access_token("account-1", expires_delta=timedelta(minutes=5))

    with freeze_time("2024-01-01 00:10:00"):
        assert decode_access_token(token) is None


@pytest.mark.unit
def test_default_lifetime_is_thirty_days():
    with freeze_time("2024-01-01 00:00:00"):
        token = create_access_token("account-1")

    with freeze_time("2024-01-30 23:59:00"):
        assert decode_access_token(token) == "account-1"
    with freeze_time("2024-01-31 00:01:00"):
        assert decode_access_token(token) is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "token",
    [
        "garbage",
        jwt.encode({"sub": "account-1"}, "another-secret", algorithm="HS256"),
        jwt.encode({"user": "account-1"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM),
    ],
)
def test_invalid_tokens_decode_to_none(token):
    assert decode_access_token(token) is None
