"""Execute a compiled QueryPlan against one mapped model."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import structlog
from pydantic.alias_generators import to_snake
from sqlalchemy import Column, ColumnElement, String, cast, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.types import JSON
from src.core.errors import RESOURCE_NOT_FOUND, NotFound
from src.domain.query import Expansion, FilterTerm, Operator, QueryPlan
from src.infrastructure.db.base import Base

logger = structlog.get_logger()

# Columns that must never be matched or sorted on from a query string
_UNQUERYABLE = frozenset({"hashed_password"})


def resolve_column(model: type[Base], field: str) -> Column[Any] | None:
    """Map a wire field name (camelCase, or a relation name) to a table column."""
    columns = model.__table__.columns
    name = to_snake(field)
    for candidate in (name, f"{name}_id"):
        if candidate in columns and candidate not in _UNQUERYABLE:
            return columns[candidate]
    return None


def coerce_value(column: Column[Any], raw: str, field: str) -> Any:
    """Convert a query-string value to the column's Python type.

    A value the column cannot hold is treated like a malformed id: NotFound.
    """
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.lower()
            if lowered not in {"true", "false", "1", "0"}:
                raise ValueError(raw)
            return lowered in {"true", "1"}
        if python_type is int:
            try:
                return int(raw)
            except ValueError:
                return float(raw)
        if python_type is float:
            return float(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if isinstance(python_type, type) and issubclass(python_type, enum.Enum):
            return python_type(raw)
    except ValueError as exc:
        logger.info("query_value_rejected", field=field, value=raw)
        raise NotFound(RESOURCE_NOT_FOUND) from exc
    return raw


def build_condition(model: type[Base], term: FilterTerm) -> ColumnElement[bool]:
    column = resolve_column(model, term.field)
    if column is None or term.operator is Operator.UNSUPPORTED:
        logger.debug(
            "query_term_ignored",
            model=model.__name__,
            field=term.field,
            operator=term.operator.value,
        )
        return false()

    if isinstance(column.type, JSON):
        return _json_membership(column, term)

    if term.operator is Operator.IN:
        values = term.value if isinstance(term.value, tuple) else (term.value,)
        return column.in_([coerce_value(column, value, term.field) for value in values])

    raw = term.value if isinstance(term.value, str) else ",".join(term.value)
    value = coerce_value(column, raw, term.field)
    if term.operator is Operator.GT:
        return column > value
    if term.operator is Operator.GTE:
        return column >= value
    if term.operator is Operator.LT:
        return column < value
    if term.operator is Operator.LTE:
        return column <= value
    return column == value


def _json_membership(column: Column[Any], term: FilterTerm) -> ColumnElement[bool]:
    # JSON arrays match when any requested element is present
    if term.operator not in (Operator.EQ, Operator.IN):
        return false()
    values = term.value if isinstance(term.value, tuple) else (term.value,)
    as_text = cast(column, String)
    return or_(*[as_text.contains(f'"{value}"') for value in values])


def build_conditions(
    model: type[Base],
    plan: QueryPlan,
    scope: Sequence[ColumnElement[bool]] = (),
) -> list[ColumnElement[bool]]:
    return [*scope, *(build_condition(model, term) for term in plan.filters)]


def build_ordering(model: type[Base], plan: QueryPlan) -> list[ColumnElement[Any]]:
    ordering: list[ColumnElement[Any]] = []
    for key in plan.sort:
        column = resolve_column(model, key.field)
        if column is None:
            continue
        ordering.append(column.desc() if key.descending else column.asc())
    # Primary key as the final tie-breaker keeps page boundaries stable
    ordering.append(model.__table__.c.id.asc())
    return ordering


async def fetch_page(
    session: AsyncSession,
    model: type[Base],
    plan: QueryPlan,
    *,
    scope: Sequence[ColumnElement[bool]] = (),
    expand: Sequence[Expansion] = (),
) -> tuple[list[Any], int]:
    """Return the rows for the plan's page window and the unpaged total."""
    conditions = build_conditions(model, plan, scope)

    count_stmt = select(func.count()).select_from(model).where(*conditions)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(model)
        .where(*conditions)
        .order_by(*build_ordering(model, plan))
        .offset(plan.skip)
        .limit(plan.take)
    )
    for expansion in expand:
        stmt = stmt.options(selectinload(getattr(model, expansion.relation)))

    rows = list((await session.execute(stmt)).scalars().all())
    await logger.adebug(
        "query_executed",
        model=model.__name__,
        filters=len(plan.filters),
        page=plan.page,
        limit=plan.limit,
        total=total,
    )
    return rows, total


async def fetch_one(
    session: AsyncSession,
    model: type[Base],
    record_id: str,
    *,
    expand: Sequence[Expansion] = (),
) -> Any | None:
    stmt = select(model).where(model.__table__.c.id == record_id)
    for expansion in expand:
        stmt = stmt.options(selectinload(getattr(model, expansion.relation)))
    return (await session.execute(stmt)).scalar_one_or_none()
