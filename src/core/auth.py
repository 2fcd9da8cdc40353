"""Credential and token primitives: password digests and signed bearer tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from passlib.context import CryptContext
from src.core.config import get_settings

# bcrypt salts every digest, so equal passwords never share a hash
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class TokenExpiredError(TokenError):
    """Raised when a correctly signed token is past its expiry."""


class TokenInvalidError(TokenError):
    """Raised when a token's signature or structure does not check out."""


class Role(str, Enum):
    USER = "user"
    PUBLISHER = "publisher"
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its digest.

    Returns False on mismatch; a digest passlib cannot identify raises ValueError.
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str,
    *,
    expires_delta: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Generate a signed JWT carrying the account id as its subject."""
    settings = get_settings()

    issued_at = now or datetime.now(UTC)
    ttl = expires_delta if expires_delta is not None else timedelta(days=settings.jwt_expire_days)
    payload = {
        "sub": subject,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
        "iss": settings.app_name,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Validate a JWT and return its subject.

    Raises TokenExpiredError past expiry and TokenInvalidError for anything else
    that fails verification.
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenInvalidError("Invalid token") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise TokenInvalidError("Token missing subject")
    return subject
