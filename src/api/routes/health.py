from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import get_db_session_factory
from src.core.config import get_settings

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(session_factory: async_sessionmaker[AsyncSession]) -> dict:
    """Round-trip a trivial query through the session factory."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


@router.get("/health", summary="Service health check")
async def health_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),
) -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()
    database_status = await check_database(session_factory)

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if database_status.get("status") == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status},
    }
    logger.info("health_checked", **payload)
    return payload
