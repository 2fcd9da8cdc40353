"""Authentication service: registration, login and self-service account updates."""

from __future__ import annotations

from typing import Any

import structlog
from src.core.auth import create_access_token, hash_password, verify_password
from src.core.errors import NotFound, Unauthorized
from src.infrastructure.db.models import UserModel, UserRole
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations."""

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def register_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: str = "user",
    ) -> tuple[UserModel, str]:
        """Create an account and return it with a fresh token."""
        await logger.ainfo("register_attempt", email=email, role=role)

        user = UserModel(
            name=name,
            email=email.lower(),
            hashed_password=hash_password(password),
            role=UserRole(role),
        )
        await self.uow.users.add(user)
        await self.uow.commit()

        await logger.ainfo("register_success", user_id=user.id, email=user.email)
        return user, create_access_token(user.id)

    async def login(self, *, email: str, password: str) -> tuple[UserModel, str]:
        """Authenticate with email and password."""
        await logger.ainfo("login_attempt", email=email)

        user = await self.uow.users.get_by_email(email)
        if user is None:
            await logger.awarning("login_user_not_found", email=email)
            raise Unauthorized("Invalid credentials")

        if not verify_password(password, user.hashed_password):
            await logger.awarning("login_invalid_password", email=email)
            raise Unauthorized("Invalid credentials")

        await logger.ainfo("login_success", user_id=user.id, email=email)
        return user, create_access_token(user.id)

    async def get_user(self, user_id: str) -> UserModel:
        user = await self.uow.users.get(user_id)
        if user is None:
            raise NotFound(f"No user with the id of {user_id}")
        return user

    async def update_details(self, user_id: str, changes: dict[str, Any]) -> UserModel:
        """Update name and/or email of the requesting account."""
        user = await self.get_user(user_id)
        allowed = {key: value for key, value in changes.items() if key in {"name", "email"}}
        await self.uow.users.update(user, allowed)
        await self.uow.commit()

        await logger.ainfo("details_updated", user_id=user_id, fields=sorted(allowed))
        return user

    async def change_password(
        self, *, user_id: str, current_password: str, new_password: str
    ) -> str:
        """Replace the password and return a new token."""
        user = await self.get_user(user_id)

        if not verify_password(current_password, user.hashed_password):
            await logger.awarning("password_change_rejected", user_id=user_id)
            raise Unauthorized("Password is incorrect")

        await self.uow.users.update(user, {"hashed_password": hash_password(new_password)})
        await self.uow.commit()

        await logger.ainfo("password_changed", user_id=user_id)
        return create_access_token(user.id)
