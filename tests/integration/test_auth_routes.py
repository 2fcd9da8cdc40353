"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from tests.utils import API, PASSWORD, auth_headers


@pytest.fixture
def test_user() -> dict:
    """Test user data."""
    return {
        "name": "Test User",
        "email": "testuser@example.com",
        "password": "testpassword123",
    }


class TestRegisterEndpoint:
    """Tests for POST /auth/register endpoint."""

    async def test_register_success(self, async_client: AsyncClient, test_user: dict) -> None:
        """Successful registration should return 201 with a token and cookie."""
        response = await async_client.post(f"{API}/auth/register", json=test_user)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["success"] is True
        assert data["token"]
        assert response.cookies.get("token") == data["token"]

    async def test_register_duplicate_email(
        self, async_client: AsyncClient, test_user: dict
    ) -> None:
        """Registering with an existing email is a duplicate value."""
        await async_client.post(f"{API}/auth/register", json=test_user)

        response = await async_client.post(f"{API}/auth/register", json=test_user)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"success": False, "error": "Duplicate field value entered"}

    async def test_register_invalid_email(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            f"{API}/auth/register",
            json={"name": "X", "email": "not-an-email", "password": "password123"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["success"] is False

    async def test_register_short_password(self, async_client: AsyncClient) -> None:
        """Password under 6 chars should be rejected."""
        response = await async_client.post(
            f"{API}/auth/register",
            json={"name": "X", "email": "test@example.com", "password": "short"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "password" in response.json()["error"]

    async def test_register_as_publisher(self, async_client: AsyncClient, test_user: dict) -> None:
        response = await async_client.post(
            f"{API}/auth/register", json={**test_user, "role": "publisher"}
        )
        token = response.json()["token"]

        me = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert me.json()["data"]["role"] == "publisher"

    async def test_register_as_admin_is_rejected(
        self, async_client: AsyncClient, test_user: dict
    ) -> None:
        response = await async_client.post(
            f"{API}/auth/register", json={**test_user, "role": "admin"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLoginEndpoint:
    """Tests for POST /auth/login endpoint."""

    async def test_login_success(self, async_client: AsyncClient, test_user: dict) -> None:
        await async_client.post(f"{API}/auth/register", json=test_user)

        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": test_user["email"], "password": test_user["password"]},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True
        assert response.json()["token"]

    async def test_login_wrong_password(self, async_client: AsyncClient, test_user: dict) -> None:
        await async_client.post(f"{API}/auth/register", json=test_user)

        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": test_user["email"], "password": "wrongpassword"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "error": "Invalid credentials"}

    async def test_login_nonexistent_user(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": "nonexistent@example.com", "password": "password123"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Invalid credentials"


class TestMeEndpoint:
    """Tests for GET /auth/me endpoint."""

    async def test_me_success(self, async_client: AsyncClient, test_user: dict) -> None:
        register_response = await async_client.post(f"{API}/auth/register", json=test_user)
        token = register_response.json()["token"]

        response = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["email"] == test_user["email"]
        assert data["name"] == test_user["name"]
        assert data["role"] == "user"
        assert "hashedPassword" not in data
        assert "password" not in data

    async def test_me_accepts_cookie(self, async_client: AsyncClient, test_user: dict) -> None:
        """The cookie set at registration authenticates later requests."""
        await async_client.post(f"{API}/auth/register", json=test_user)

        response = await async_client.get(f"{API}/auth/me")

        assert response.status_code == status.HTTP_200_OK

    async def test_me_no_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{API}/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Not authorized to access this route"

    async def test_me_invalid_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestLogoutEndpoint:
    async def test_logout_clears_cookie(self, async_client: AsyncClient, test_user: dict) -> None:
        await async_client.post(f"{API}/auth/register", json=test_user)

        response = await async_client.get(f"{API}/auth/logout")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "data": {}}
        assert "token" not in async_client.cookies

        after = await async_client.get(f"{API}/auth/me")
        assert after.status_code == status.HTTP_401_UNAUTHORIZED


class TestUpdateDetailsEndpoint:
    async def test_update_name_and_email(self, async_client: AsyncClient, reviewer) -> None:
        response = await async_client.put(
            f"{API}/auth/updatedetails",
            json={"name": "Renamed", "email": "Renamed@Example.com"},
            headers=auth_headers(reviewer),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["email"] == "renamed@example.com"
        assert data["role"] == "user"

    async def test_role_cannot_be_changed(self, async_client: AsyncClient, reviewer) -> None:
        response = await async_client.put(
            f"{API}/auth/updatedetails",
            json={"role": "admin"},
            headers=auth_headers(reviewer),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestUpdatePasswordEndpoint:
    """Tests for PUT /auth/updatepassword endpoint."""

    async def test_update_password_success(self, async_client: AsyncClient, reviewer) -> None:
        response = await async_client.put(
            f"{API}/auth/updatepassword",
            json={"currentPassword": PASSWORD, "newPassword": "newpassword123"},
            headers=auth_headers(reviewer),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["token"]

        login_response = await async_client.post(
            f"{API}/auth/login",
            json={"email": reviewer.email, "password": "newpassword123"},
        )
        assert login_response.status_code == status.HTTP_200_OK

    async def test_update_password_wrong_current(
        self, async_client: AsyncClient, reviewer
    ) -> None:
        response = await async_client.put(
            f"{API}/auth/updatepassword",
            json={"currentPassword": "wrongpassword", "newPassword": "newpassword123"},
            headers=auth_headers(reviewer),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Password is incorrect"
