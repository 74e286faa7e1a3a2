"""
Tests for token issuing/verification and password hashing.
"""

from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.exceptions import UnauthorizedError
from app.core.ids import new_object_id
from app.core.permissions import Role
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_token_round_trip() -> None:
    user_id = new_object_id()
    claims = decode_access_token(create_access_token(user_id, Role.SUB_ADMIN))
    assert claims.sub == user_id
    assert claims.user_id == user_id
    assert claims.role is Role.SUB_ADMIN


def test_expired_token_is_rejected() -> None:
    token = create_access_token(new_object_id(), Role.USER, expires_delta=timedelta(seconds=-5))
    with pytest.raises(UnauthorizedError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = jwt.encode(
        {"sub": new_object_id(), "role": "user", "exp": 9999999999},
        "not-the-secret",
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token("not-a-jwt")


@pytest.mark.parametrize(
    "payload",
    [
        {"sub": "not-an-id", "role": "user"},
        {"sub": "a" * 24, "role": "emperor"},
        {"role": "user"},
    ],
)
def test_bad_claims_are_rejected(payload: dict) -> None:
    payload = {**payload, "exp": 9999999999}
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(UnauthorizedError, match="claims"):
        decode_access_token(token)


def test_password_hashing() -> None:
    hashed = get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
