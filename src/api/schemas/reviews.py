from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel, UpdateModel


class ReviewRead(CamelModel):
    id: str
    title: str
    text: str
    rating: int
    bootcamp_id: str = Field(serialization_alias="bootcamp")
    user_id: str = Field(serialization_alias="user")
    created_at: datetime


class ReviewCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=10)


class ReviewUpdate(UpdateModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    text: str | None = Field(None, min_length=1)
    rating: int | None = Field(None, ge=1, le=10)
