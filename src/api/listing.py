"""Advanced-results helpers shared by every listing and detail endpoint."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import Request
from sqlalchemy import ColumnElement, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.schemas.auth import UserRead
from src.api.schemas.bootcamps import BootcampRead
from src.api.schemas.common import CamelModel
from src.api.schemas.courses import CourseRead
from src.api.schemas.reviews import ReviewRead
from src.core.config import get_settings
from src.domain.query import Expansion, Page, QueryPlan, build_pagination, compile_query
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import BootcampModel, CourseModel, ReviewModel, UserModel
from src.infrastructure.repositories.listing import fetch_page

READ_SCHEMAS: dict[type[Base], type[CamelModel]] = {
    UserModel: UserRead,
    BootcampModel: BootcampRead,
    CourseModel: CourseRead,
    ReviewModel: ReviewRead,
}


def query_plan(request: Request) -> QueryPlan:
    """Dependency compiling the request's query string."""
    return compile_query(
        dict(request.query_params),
        default_limit=get_settings().default_page_limit,
    )


def project(data: dict[str, Any], fields: Sequence[str] | None) -> dict[str, Any]:
    """Keep only the requested wire fields; the id is always returned."""
    if not fields:
        return data
    keep = {"id", *fields}
    return {key: value for key, value in data.items() if key in keep}


def serialize(
    record: Base,
    *,
    select: Sequence[str] | None = None,
    expand: Sequence[Expansion] = (),
) -> dict[str, Any]:
    schema = READ_SCHEMAS[type(record)]
    data = project(schema.model_validate(record).to_wire(), select)

    for expansion in expand:
        related = getattr(record, expansion.relation)
        target = inspect(type(record)).relationships[expansion.relation].mapper.class_
        related_schema = READ_SCHEMAS[target]
        if isinstance(related, list):
            data[expansion.relation] = [
                project(related_schema.model_validate(item).to_wire(), expansion.fields)
                for item in related
            ]
        elif related is not None:
            data[expansion.relation] = project(
                related_schema.model_validate(related).to_wire(), expansion.fields
            )
    return data


async def paginate(
    session: AsyncSession,
    model: type[Base],
    plan: QueryPlan,
    *,
    scope: Sequence[ColumnElement[bool]] = (),
    expand: Sequence[Expansion] = (),
) -> dict[str, Any]:
    """Run the plan and wrap the page in the listing envelope."""
    rows, total = await fetch_page(session, model, plan, scope=scope, expand=expand)
    page = Page(
        items=[serialize(row, select=plan.select, expand=expand) for row in rows],
        total=total,
        pagination=build_pagination(plan.page, plan.limit, total),
    )
    return page.envelope()
