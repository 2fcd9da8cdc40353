from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from src.api.deps import get_db_session, get_db_session_factory
from src.api.main import create_app
from src.core.config import get_settings
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import UserModel, UserRole

from tests.utils import create_account


@pytest.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enforce_foreign_keys(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    settings = get_settings().model_copy(update={"rate_limit_enabled": False})
    application = create_app(settings)

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_db_session_factory] = lambda: session_factory
    return application


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client for testing async routes."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture()
async def admin(db: AsyncSession) -> UserModel:
    return await create_account(db, name="Site Admin", role=UserRole.ADMIN)


@pytest.fixture()
async def publisher(db: AsyncSession) -> UserModel:
    return await create_account(db, name="Publisher One", role=UserRole.PUBLISHER)


@pytest.fixture()
async def other_publisher(db: AsyncSession) -> UserModel:
    return await create_account(db, name="Publisher Two", role=UserRole.PUBLISHER)


@pytest.fixture()
async def reviewer(db: AsyncSession) -> UserModel:
    return await create_account(db, name="Reviewer One")


@pytest.fixture()
async def other_reviewer(db: AsyncSession) -> UserModel:
    return await create_account(db, name="Reviewer Two")
