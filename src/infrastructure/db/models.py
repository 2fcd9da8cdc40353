from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserRole(str, enum.Enum):
    """User role enum matching auth.Role."""

    USER = "user"
    PUBLISHER = "publisher"
    ADMIN = "admin"


class MinimumSkill(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class UserModel(Base):
    """SQLAlchemy model for users table."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [x.value for x in e]),
        default=UserRole.USER,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class BootcampModel(Base):
    """Parent resource; average_cost and average_rating are derived from children."""

    __tablename__ = "bootcamps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(255))
    careers: Mapped[list[str] | None] = mapped_column(JSON)
    housing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    average_cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    courses: Mapped[list[CourseModel]] = relationship(
        back_populates="bootcamp",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reviews: Mapped[list[ReviewModel]] = relationship(
        back_populates="bootcamp",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CourseModel(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    weeks: Mapped[str] = mapped_column(String(16), nullable=False)
    tuition: Mapped[float] = mapped_column(Float, nullable=False)
    minimum_skill: Mapped[MinimumSkill] = mapped_column(
        Enum(MinimumSkill, name="minimum_skill", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    scholarship_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    bootcamp_id: Mapped[str] = mapped_column(
        ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    bootcamp: Mapped[BootcampModel] = relationship(back_populates="courses")


class ReviewModel(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("bootcamp_id", "user_id", name="uq_review_per_user"),
        CheckConstraint("rating >= 1 AND rating <= 10", name="ck_review_rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    bootcamp_id: Mapped[str] = mapped_column(
        ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    bootcamp: Mapped[BootcampModel] = relationship(back_populates="reviews")
