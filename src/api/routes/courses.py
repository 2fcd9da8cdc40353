from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_uow, owned_resource, parse_record_id, require_roles
from src.api.listing import paginate, query_plan, serialize
from src.api.schemas.courses import CourseCreate, CourseUpdate
from src.core.auth import Role
from src.core.errors import NotFound
from src.domain import User
from src.domain.query import Expansion, QueryPlan
from src.domain.services.catalog import CatalogService
from src.infrastructure.db.models import BootcampModel, CourseModel
from src.infrastructure.repositories.listing import fetch_one
from src.infrastructure.repositories.unit_of_work import UnitOfWork

router = APIRouter(tags=["Courses"])

COURSE_NOT_FOUND = "No course with the id of {id}"
WITH_BOOTCAMP = (Expansion("bootcamp", fields=("name", "description")),)

publisher_or_admin = require_roles(Role.PUBLISHER, Role.ADMIN)
owned_course = owned_resource(CourseModel, param="course_id", not_found=COURSE_NOT_FOUND)
owned_parent = owned_resource(
    BootcampModel, param="bootcamp_id", not_found="No bootcamp with the id of {id}"
)


@router.get("/courses", summary="List courses")
async def list_courses(
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await paginate(session, CourseModel, plan, expand=WITH_BOOTCAMP)


@router.get("/bootcamps/{bootcamp_id}/courses", summary="List courses of a bootcamp")
async def list_bootcamp_courses(
    bootcamp_id: str,
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    record_id = parse_record_id(bootcamp_id)
    return await paginate(session, CourseModel, plan, scope=[CourseModel.bootcamp_id == record_id])


@router.get("/courses/{course_id}", summary="Get course")
async def get_course(
    course_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    record_id = parse_record_id(course_id)
    course = await fetch_one(session, CourseModel, record_id, expand=WITH_BOOTCAMP)
    if course is None:
        raise NotFound(COURSE_NOT_FOUND.format(id=record_id))
    return {"success": True, "data": serialize(course, expand=WITH_BOOTCAMP)}


@router.post(
    "/bootcamps/{bootcamp_id}/courses",
    status_code=status.HTTP_201_CREATED,
    summary="Add course to bootcamp",
)
async def create_course(
    payload: CourseCreate,
    user: User = Depends(publisher_or_admin),
    bootcamp: BootcampModel = Depends(owned_parent),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    """Add a course; only the bootcamp owner or an admin may do so."""
    course = await CatalogService(uow).add_course(user, bootcamp, payload.model_dump())
    return {"success": True, "data": serialize(course)}


@router.put("/courses/{course_id}", dependencies=[Depends(publisher_or_admin)], summary="Update course")
async def update_course(
    payload: CourseUpdate,
    course: CourseModel = Depends(owned_course),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    course = await CatalogService(uow).update_course(course, payload.changes())
    return {"success": True, "data": serialize(course)}


@router.delete(
    "/courses/{course_id}", dependencies=[Depends(publisher_or_admin)], summary="Delete course"
)
async def delete_course(
    course: CourseModel = Depends(owned_course),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    await CatalogService(uow).delete_course(course)
    return {"success": True, "data": {}}
