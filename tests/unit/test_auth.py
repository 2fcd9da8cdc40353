from datetime import UTC, datetime, timedelta

import jwt
import pytest
from src.core.auth import (
    Role,
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_access_token,
)
from src.core.config import get_settings
from src.domain import User


def test_create_and_decode_token_roundtrip() -> None:
    token = create_access_token("user-123")

    assert decode_access_token(token) == "user-123"


def test_token_carries_issue_and_expiry_claims() -> None:
    settings = get_settings()
    issued = datetime(2026, 1, 1, tzinfo=UTC)
    token = create_access_token("user-123", now=issued, expires_delta=timedelta(days=1))

    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"verify_exp": False},
    )

    assert payload["iat"] == int(issued.timestamp())
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60
    assert payload["iss"] == settings.app_name


def test_expired_token_is_rejected() -> None:
    token = create_access_token("user-123", expires_delta=timedelta(seconds=-30))

    with pytest.raises(TokenExpiredError):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = jwt.encode(
        {"sub": "user-123", "iat": 0, "exp": 4_102_444_800, "iss": get_settings().app_name},
        "not-the-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalidError):
        decode_access_token(forged)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(TokenInvalidError):
        decode_access_token("not.a.jwt")


def test_token_without_subject_is_rejected() -> None:
    settings = get_settings()
    token = jwt.encode(
        {"iat": 0, "exp": 4_102_444_800, "iss": settings.app_name},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenInvalidError):
        decode_access_token(token)


def test_role_contains_known_values_only() -> None:
    assert Role.contains("publisher")
    assert not Role.contains("student")


def test_request_user_ownership() -> None:
    publisher = User(user_id="u-1", role=Role.PUBLISHER)
    admin = User(user_id="u-2", role=Role.ADMIN)

    assert publisher.owns("u-1")
    assert not publisher.owns("u-2")
    assert not publisher.owns(None)
    assert not publisher.is_admin
    assert admin.is_admin
