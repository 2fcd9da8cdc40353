"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import EmailStr, Field, field_validator

from src.infrastructure.db.models import UserRole

from .common import CamelModel, UpdateModel


class RegistrationRole(str, Enum):
    """Roles an account may pick for itself; admins are created by admins."""

    USER = "user"
    PUBLISHER = "publisher"


# --- Request Schemas ---


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=128, description="Password (min 6 characters)")
    role: RegistrationRole = Field(default=RegistrationRole.USER)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(CamelModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class UpdateDetailsRequest(UpdateModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


# --- Response Schemas ---


class UserRead(CamelModel):
    """Outward view of an account; the password digest is never included."""

    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime


class TokenResponse(CamelModel):
    success: bool = True
    token: str
