from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from src.core.auth import Role

from .common import CamelModel, UpdateModel


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.USER

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(UpdateModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None
    role: Role | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value
