from __future__ import annotations

from datetime import datetime

from pydantic import Field

from src.infrastructure.db.models import MinimumSkill

from .common import CamelModel, UpdateModel


class CourseRead(CamelModel):
    id: str
    title: str
    description: str
    weeks: str
    tuition: float
    minimum_skill: MinimumSkill
    scholarship_available: bool
    bootcamp_id: str = Field(serialization_alias="bootcamp")
    user_id: str = Field(serialization_alias="user")
    created_at: datetime


class CourseCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    weeks: str = Field(..., min_length=1, max_length=16)
    tuition: float = Field(..., ge=0)
    minimum_skill: MinimumSkill
    scholarship_available: bool = False


class CourseUpdate(UpdateModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    weeks: str | None = Field(None, min_length=1, max_length=16)
    tuition: float | None = Field(None, ge=0)
    minimum_skill: MinimumSkill | None = None
    scholarship_available: bool | None = None
