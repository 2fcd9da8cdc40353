"""Initial schema: users, bootcamps, courses, reviews

Revision ID: 202610180001
Revises:
Create Date: 2026-10-18 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610180001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("user", "publisher", "admin", name="user_role")
minimum_skill_enum = sa.Enum("beginner", "intermediate", "advanced", name="minimum_skill")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "bootcamps",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("careers", sa.JSON(), nullable=True),
        sa.Column("housing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("job_assistance", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("job_guarantee", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("accept_gi", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("average_cost", sa.Integer(), nullable=True),
        sa.Column("average_rating", sa.Float(), nullable=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bootcamps_slug", "bootcamps", ["slug"])
    op.create_index("ix_bootcamps_user_id", "bootcamps", ["user_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("weeks", sa.String(length=16), nullable=False),
        sa.Column("tuition", sa.Float(), nullable=False),
        sa.Column("minimum_skill", minimum_skill_enum, nullable=False),
        sa.Column(
            "scholarship_available", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "bootcamp_id",
            sa.String(length=36),
            sa.ForeignKey("bootcamps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_courses_bootcamp_id", "courses", ["bootcamp_id"])
    op.create_index("ix_courses_user_id", "courses", ["user_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column(
            "bootcamp_id",
            sa.String(length=36),
            sa.ForeignKey("bootcamps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("bootcamp_id", "user_id", name="uq_review_per_user"),
        sa.CheckConstraint("rating >= 1 AND rating <= 10", name="ck_review_rating_range"),
    )
    op.create_index("ix_reviews_bootcamp_id", "reviews", ["bootcamp_id"])
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("courses")
    op.drop_table("bootcamps")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    minimum_skill_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
