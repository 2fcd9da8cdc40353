"""Unit tests for password hashing and auth request schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.api.schemas.auth import LoginRequest, RegisterRequest, UserRead
from src.core.auth import hash_password, verify_password


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_returns_bcrypt_hash(self) -> None:
        """Hash should start with bcrypt prefix."""
        hashed = hash_password("test_password_123")

        assert hashed.startswith("$2b$")
        assert len(hashed) == 60

    def test_hash_password_is_not_plaintext(self) -> None:
        password = "test_password_123"

        assert password not in hash_password(password)

    def test_hash_password_unique_per_call(self) -> None:
        """Same password should produce different hashes (due to salt)."""
        password = "test_password_123"

        assert hash_password(password) != hash_password(password)

    def test_verify_password_correct(self) -> None:
        hashed = hash_password("test_password_123")

        assert verify_password("test_password_123", hashed) is True

    def test_verify_password_incorrect(self) -> None:
        hashed = hash_password("test_password_123")

        assert verify_password("wrong_password", hashed) is False

    def test_verify_password_case_sensitive(self) -> None:
        """Passwords should be case-sensitive."""
        hashed = hash_password("TestPassword123")

        assert verify_password("testpassword123", hashed) is False
        assert verify_password("TESTPASSWORD123", hashed) is False


class TestAuthSchemas:
    """Tests for auth request/response schemas."""

    def test_register_request_defaults_to_user_role(self) -> None:
        request = RegisterRequest(name="Test User", email="Test@Example.com", password="secret1")

        assert request.email == "test@example.com"
        assert request.role.value == "user"

    def test_register_request_accepts_publisher(self) -> None:
        request = RegisterRequest(
            name="Test User", email="test@example.com", password="secret1", role="publisher"
        )

        assert request.role.value == "publisher"

    def test_register_request_rejects_admin_role(self) -> None:
        """Admin accounts cannot be self-registered."""
        with pytest.raises(ValidationError):
            RegisterRequest(
                name="Test User", email="test@example.com", password="secret1", role="admin"
            )

    def test_register_request_password_min_length(self) -> None:
        """Password must be at least 6 characters."""
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest(name="Test User", email="test@example.com", password="short")

        assert "String should have at least 6 characters" in str(exc_info.value)

    def test_register_request_invalid_email(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest(name="Test User", email="not-an-email", password="password123")

        assert "value is not a valid email address" in str(exc_info.value)

    def test_login_request_valid(self) -> None:
        request = LoginRequest(email="test@example.com", password="password123")

        assert request.email == "test@example.com"
        assert request.password == "password123"

    def test_user_read_serialization_omits_password(self) -> None:
        """UserRead should serialize with camelCase keys and no digest."""
        from datetime import datetime

        response = UserRead(
            id="user-123",
            name="Test User",
            email="test@example.com",
            role="publisher",
            created_at=datetime(2024, 12, 30, 10, 0, 0),
        )

        wire = response.to_wire()
        assert wire["role"] == "publisher"
        assert wire["createdAt"].startswith("2024-12-30T10:00:00")
        assert "hashedPassword" not in wire
