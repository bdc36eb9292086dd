"""Unit tests for password hashing and bearer tokens."""

import pytest
from jose import jwt
from libs.auth.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from libs.common.config import get_settings


@pytest.mark.unit
def test_hash_is_salted_and_verifies():
    first = hash_password("s3cret-pass")
    second = hash_password("s3cret-pass")

    assert first != second
    assert first != "s3cret-pass"
    assert verify_password("s3cret-pass", first)
    assert not verify_password("wrong-pass", first)


@pytest.mark.unit
def test_verify_password_handles_missing_or_foreign_hash():
    assert verify_password("anything", None) is False
    assert verify_password("anything", "not-a-bcrypt-hash") is False


@pytest.mark.unit
def test_token_round_trip_carries_identity_and_expiry():
    token = create_access_token(
        {"id": "abc", "email": "a@example.com", "username": "a", "role": "admin"}
    )
    payload = decode_access_token(token)

    assert payload["id"] == "abc"
    assert payload["role"] == "admin"
    assert payload["exp"] - payload["iat"] == get_settings().JWT_EXPIRE_DAYS * 86400


@pytest.mark.unit
def test_expired_token_is_rejected():
    token = create_access_token({"id": "abc"}, expires_days=-1)
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


@pytest.mark.unit
def test_token_signed_with_another_secret_is_rejected():
    forged = jwt.encode({"id": "abc", "role": "admin"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        decode_access_token(forged)


@pytest.mark.unit
def test_garbage_token_is_rejected():
    with pytest.raises(InvalidTokenError):
        decode_access_token("not.a.token")
