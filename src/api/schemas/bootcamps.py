from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field

from .common import CamelModel, UpdateModel

Career = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]


class BootcampRead(CamelModel):
    id: str
    name: str
    slug: str
    description: str
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    careers: list[str] | None = None
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    average_cost: int | None = None
    average_rating: float | None = None
    user_id: str = Field(serialization_alias="user")
    created_at: datetime


class BootcampCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    website: str | None = Field(None, pattern=r"^https?://")
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    address: str = Field(..., min_length=1, max_length=255)
    careers: list[Career] = Field(..., min_length=1)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False


class BootcampUpdate(UpdateModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, min_length=1, max_length=500)
    website: str | None = Field(None, pattern=r"^https?://")
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    address: str | None = Field(None, min_length=1, max_length=255)
    careers: list[Career] | None = None
    housing: bool | None = None
    job_assistance: bool | None = None
    job_guarantee: bool | None = None
    accept_gi: bool | None = None
