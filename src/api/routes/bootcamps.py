from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_uow, owned_resource, parse_record_id, require_roles
from src.api.listing import paginate, query_plan, serialize
from src.api.schemas.bootcamps import BootcampCreate, BootcampUpdate
from src.core.auth import Role
from src.core.errors import NotFound
from src.domain import User
from src.domain.query import Expansion, QueryPlan
from src.domain.services.catalog import CatalogService
from src.infrastructure.db.models import BootcampModel
from src.infrastructure.repositories.listing import fetch_one
from src.infrastructure.repositories.unit_of_work import UnitOfWork

router = APIRouter(prefix="/bootcamps", tags=["Bootcamps"])
logger = structlog.get_logger()

BOOTCAMP_NOT_FOUND = "Bootcamp not found with id of {id}"
WITH_COURSES = (Expansion("courses"),)

publisher_or_admin = require_roles(Role.PUBLISHER, Role.ADMIN)
owned_bootcamp = owned_resource(BootcampModel, param="bootcamp_id", not_found=BOOTCAMP_NOT_FOUND)


@router.get("", summary="List bootcamps")
async def list_bootcamps(
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """Filter, sort and page bootcamps; each includes its courses."""
    return await paginate(session, BootcampModel, plan, expand=WITH_COURSES)


@router.get("/{bootcamp_id}", summary="Get bootcamp")
async def get_bootcamp(
    bootcamp_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    record_id = parse_record_id(bootcamp_id)
    bootcamp = await fetch_one(session, BootcampModel, record_id)
    if bootcamp is None:
        raise NotFound(BOOTCAMP_NOT_FOUND.format(id=record_id))
    return {"success": True, "data": serialize(bootcamp)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create bootcamp")
async def create_bootcamp(
    payload: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    """Create a bootcamp owned by the requester (publisher or admin)."""
    bootcamp = await CatalogService(uow).create_bootcamp(user, payload.model_dump())
    return {"success": True, "data": serialize(bootcamp)}


@router.put("/{bootcamp_id}", dependencies=[Depends(publisher_or_admin)], summary="Update bootcamp")
async def update_bootcamp(
    payload: BootcampUpdate,
    bootcamp: BootcampModel = Depends(owned_bootcamp),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    bootcamp = await CatalogService(uow).update_bootcamp(bootcamp, payload.changes())
    return {"success": True, "data": serialize(bootcamp)}


@router.delete(
    "/{bootcamp_id}", dependencies=[Depends(publisher_or_admin)], summary="Delete bootcamp"
)
async def delete_bootcamp(
    bootcamp: BootcampModel = Depends(owned_bootcamp),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    """Delete a bootcamp together with its courses and reviews."""
    await CatalogService(uow).delete_bootcamp(bootcamp)
    return {"success": True, "data": {}}
