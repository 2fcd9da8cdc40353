"""Process-wide engine and session factory, created lazily from settings."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from src.core.config import Settings, get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not settings.uses_sqlite:
        options.update(pool_pre_ping=True, pool_size=settings.database_pool_size)
    return options


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _engine, _session_factory

    if _session_factory is None:
        settings = get_settings()
        _engine = create_async_engine(settings.async_database_url, **engine_options(settings))
        # Objects stay readable after commit; responses serialize them post-commit
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown; the next request builds a fresh engine."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
