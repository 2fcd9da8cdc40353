"""Derived averages stored on bootcamps.

Every recomputation reads the current children in full, so concurrent runs for
the same bootcamp converge on the value written by whichever finishes last.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import BootcampModel, CourseModel, ReviewModel

logger = structlog.get_logger()


def ceil_to_ten(value: float) -> int:
    """Round up to the next multiple of ten (15 -> 20, 20 -> 20)."""
    return int(math.ceil(value / 10) * 10)


def unrounded(value: float) -> float:
    return float(value)


@dataclass(frozen=True, slots=True)
class AggregateDefinition:
    """Mean of ``source.field`` over children of a bootcamp, stored in ``target``."""

    name: str
    source: type[Base]
    field: str
    target: str
    rounding: Callable[[float], float | int]

    @property
    def parent_key(self):
        return self.source.__table__.c.bootcamp_id

    @property
    def source_column(self):
        return self.source.__table__.c[self.field]


AVERAGE_COST = AggregateDefinition(
    name="average_cost",
    source=CourseModel,
    field="tuition",
    target="average_cost",
    rounding=ceil_to_ten,
)

AVERAGE_RATING = AggregateDefinition(
    name="average_rating",
    source=ReviewModel,
    field="rating",
    target="average_rating",
    rounding=unrounded,
)


async def compute_mean(
    session: AsyncSession, definition: AggregateDefinition, bootcamp_id: str
) -> float | int | None:
    """Rounded mean across live children, or None when there are none."""
    stmt = select(func.avg(definition.source_column), func.count()).where(
        definition.parent_key == bootcamp_id
    )
    mean, count = (await session.execute(stmt)).one()
    if not count or mean is None:
        return None
    return definition.rounding(float(mean))


class AggregateMaintainer:
    """Recomputes bootcamp aggregates in their own session after a child commit."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def recompute(
        self, definition: AggregateDefinition, bootcamp_id: str
    ) -> float | int | None:
        """Write the fresh mean onto the bootcamp.

        Failures are logged and swallowed; the child mutation that triggered the
        run has already been committed and must not be affected.
        """
        try:
            async with self.session_factory() as session:
                value = await compute_mean(session, definition, bootcamp_id)
                result = await session.execute(
                    update(BootcampModel)
                    .where(BootcampModel.id == bootcamp_id)
                    .values({definition.target: value})
                )
                await session.commit()
        except Exception:
            await logger.aexception(
                "aggregate_recompute_failed",
                aggregate=definition.name,
                bootcamp_id=bootcamp_id,
            )
            return None

        if result.rowcount == 0:
            await logger.awarning(
                "aggregate_parent_missing",
                aggregate=definition.name,
                bootcamp_id=bootcamp_id,
            )
            return None

        await logger.ainfo(
            "aggregate_recomputed",
            aggregate=definition.name,
            bootcamp_id=bootcamp_id,
            value=value,
        )
        return value
