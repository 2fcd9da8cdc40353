from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.errors import Conflict
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import BootcampModel, CourseModel, ReviewModel, UserModel
from src.infrastructure.repositories.aggregates import (
    AVERAGE_COST,
    AVERAGE_RATING,
    AggregateDefinition,
    AggregateMaintainer,
)

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)
PostCommit = Callable[..., Awaitable[Any]]
Dispatcher = Callable[..., None]

_background_tasks: set[asyncio.Task[Any]] = set()


def spawn(callback: PostCommit, *args: Any) -> None:
    """Fire-and-forget dispatcher used outside a request cycle."""
    task = asyncio.create_task(callback(*args))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


class SqlRepository(Generic[ModelT]):
    """Basic persistence for one mapped model inside a unit of work."""

    model: type[ModelT]

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    @property
    def session(self) -> AsyncSession:
        return self.uow.session

    async def get(self, record_id: str) -> ModelT | None:
        return await self.session.get(self.model, record_id)

    async def add(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.uow.flush()
        return entity

    async def update(self, entity: ModelT, values: dict[str, Any]) -> ModelT:
        for key, value in values.items():
            setattr(entity, key, value)
        await self.uow.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.uow.flush()


class UserRepository(SqlRepository[UserModel]):
    model = UserModel

    async def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email.lower())
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def delete(self, entity: UserModel) -> None:
        """Delete an account with everything it authored.

        Bootcamps that lose a course or review written by the account get their
        aggregates recomputed after commit.
        """
        owned_stmt = select(BootcampModel).where(BootcampModel.user_id == entity.id)
        owned = list((await self.session.execute(owned_stmt)).scalars().all())
        owned_ids = {bootcamp.id for bootcamp in owned}
        for bootcamp in owned:
            await self.uow.bootcamps.delete(bootcamp)

        touched: list[tuple[type[Base], str]] = []
        for child in (CourseModel, ReviewModel):
            parents = select(child.bootcamp_id).where(child.user_id == entity.id).distinct()
            for bootcamp_id in (await self.session.execute(parents)).scalars():
                if bootcamp_id not in owned_ids:
                    touched.append((child, bootcamp_id))
            await self.session.execute(delete(child).where(child.user_id == entity.id))

        await super().delete(entity)
        for child, bootcamp_id in touched:
            self.uow.bootcamps.child_changed(child, bootcamp_id)


class BootcampRepository(SqlRepository[BootcampModel]):
    """Owns the aggregate definitions derived from its children."""

    model = BootcampModel
    aggregates: tuple[AggregateDefinition, ...] = (AVERAGE_COST, AVERAGE_RATING)

    def __init__(self, uow: UnitOfWork, maintainer: AggregateMaintainer) -> None:
        super().__init__(uow)
        self.maintainer = maintainer

    def child_changed(self, source: type[Base], bootcamp_id: str) -> None:
        """Register post-commit recomputation of every aggregate fed by ``source``."""
        for definition in self.aggregates:
            if definition.source is source:
                self.uow.after_commit(self.maintainer.recompute, definition, bootcamp_id)

    async def find_by_owner(self, user_id: str) -> BootcampModel | None:
        stmt = select(BootcampModel).where(BootcampModel.user_id == user_id).limit(1)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def delete(self, entity: BootcampModel) -> None:
        # Children go first so the delete does not depend on FK cascade support
        await self.session.execute(delete(CourseModel).where(CourseModel.bootcamp_id == entity.id))
        await self.session.execute(delete(ReviewModel).where(ReviewModel.bootcamp_id == entity.id))
        await super().delete(entity)


class ChildRepository(SqlRepository[ModelT]):
    """Children of a bootcamp; each write schedules aggregate recomputation."""

    async def add(self, entity: ModelT) -> ModelT:
        entity = await super().add(entity)
        self.uow.bootcamps.child_changed(self.model, entity.bootcamp_id)
        return entity

    async def update(self, entity: ModelT, values: dict[str, Any]) -> ModelT:
        entity = await super().update(entity, values)
        self.uow.bootcamps.child_changed(self.model, entity.bootcamp_id)
        return entity

    async def delete(self, entity: ModelT) -> None:
        bootcamp_id = entity.bootcamp_id
        await super().delete(entity)
        self.uow.bootcamps.child_changed(self.model, bootcamp_id)


class CourseRepository(ChildRepository[CourseModel]):
    model = CourseModel


class ReviewRepository(ChildRepository[ReviewModel]):
    model = ReviewModel


class UnitOfWork:
    """Groups repository writes into one commit and runs post-commit callbacks."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        maintainer: AggregateMaintainer,
        dispatch: Dispatcher = spawn,
    ) -> None:
        self.session = session
        self.dispatch = dispatch
        self._post_commit: list[tuple[PostCommit, tuple[Any, ...]]] = []
        self.users = UserRepository(self)
        self.bootcamps = BootcampRepository(self, maintainer)
        self.courses = CourseRepository(self)
        self.reviews = ReviewRepository(self)

    async def __aenter__(self) -> UnitOfWork:
        logger.debug("uow_enter")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            await self.commit()
        logger.debug("uow_exit", exc_type=str(exc_type) if exc_type else None)

    def after_commit(self, callback: PostCommit, *args: Any) -> None:
        if (callback, args) not in self._post_commit:
            self._post_commit.append((callback, args))

    async def flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self._conflict(exc)

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self._conflict(exc)

        pending, self._post_commit = self._post_commit, []
        for callback, args in pending:
            self.dispatch(callback, *args)
        logger.debug("uow_commit", post_commit=len(pending))

    async def rollback(self) -> None:
        self._post_commit.clear()
        await self.session.rollback()
        logger.debug("uow_rollback")

    async def _conflict(self, exc: IntegrityError) -> None:
        await self.rollback()
        await logger.awarning("integrity_conflict", error=str(exc.orig).split("\n")[0])
        raise Conflict() from exc
