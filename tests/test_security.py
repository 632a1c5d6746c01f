from datetime import timedelta

import pytest

from taskboard.core.exceptions import TokenExpiredException, TokenInvalidException
from taskboard.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    new_session_id,
    token_ttl,
    verify_password,
)


def test_password_hashing():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", None)


def test_token_types_are_checked():
    access = create_access_token("user-1")
    refresh = create_refresh_token("user-1")

    assert decode_token(access)["sub"] == "user-1"
    assert decode_token(refresh, "refresh")["type"] == "refresh"
    with pytest.raises(TokenInvalidException):
        decode_token(refresh, "access")


def test_expired_token():
    token = create_access_token("user-1", expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenExpiredException):
        decode_token(token)


def test_token_ttl():
    payload = decode_token(create_access_token("user-1", expires_delta=timedelta(minutes=5)))
    assert 0 < token_ttl(payload) <= 300
    assert token_ttl({}) == 0


def test_tokens_from_one_login_share_session_id():
    session_id = new_session_id()
    access = decode_token(create_access_token("user-1", session_id=session_id))
    refresh = decode_token(create_refresh_token("user-1", session_id=session_id), "refresh")

    assert access["sid"] == refresh["sid"] == session_id
    assert "sid" not in decode_token(create_access_token("user-1"))
    assert new_session_id() != session_id
