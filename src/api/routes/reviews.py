from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_uow, owned_resource, parse_record_id, require_roles
from src.api.listing import paginate, query_plan, serialize
from src.api.schemas.reviews import ReviewCreate, ReviewUpdate
from src.core.auth import Role
from src.core.errors import NotFound
from src.domain import User
from src.domain.query import Expansion, QueryPlan
from src.domain.services.catalog import CatalogService
from src.infrastructure.db.models import ReviewModel
from src.infrastructure.repositories.listing import fetch_one
from src.infrastructure.repositories.unit_of_work import UnitOfWork

router = APIRouter(tags=["Reviews"])

REVIEW_NOT_FOUND = "No review found with the id of {id}"
WITH_BOOTCAMP = (Expansion("bootcamp", fields=("name", "description")),)

reviewer_or_admin = require_roles(Role.USER, Role.ADMIN)
owned_review = owned_resource(ReviewModel, param="review_id", not_found=REVIEW_NOT_FOUND)


@router.get("/reviews", summary="List reviews")
async def list_reviews(
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await paginate(session, ReviewModel, plan, expand=WITH_BOOTCAMP)


@router.get("/bootcamps/{bootcamp_id}/reviews", summary="List reviews of a bootcamp")
async def list_bootcamp_reviews(
    bootcamp_id: str,
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    record_id = parse_record_id(bootcamp_id)
    return await paginate(session, ReviewModel, plan, scope=[ReviewModel.bootcamp_id == record_id])


@router.get("/reviews/{review_id}", summary="Get review")
async def get_review(
    review_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    record_id = parse_record_id(review_id)
    review = await fetch_one(session, ReviewModel, record_id, expand=WITH_BOOTCAMP)
    if review is None:
        raise NotFound(REVIEW_NOT_FOUND.format(id=record_id))
    return {"success": True, "data": serialize(review, expand=WITH_BOOTCAMP)}


@router.post(
    "/bootcamps/{bootcamp_id}/reviews",
    status_code=status.HTTP_201_CREATED,
    summary="Review a bootcamp",
)
async def create_review(
    bootcamp_id: str,
    payload: ReviewCreate,
    user: User = Depends(reviewer_or_admin),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    """Add the requester's review; one review per account and bootcamp."""
    review = await CatalogService(uow).add_review(
        user, parse_record_id(bootcamp_id), payload.model_dump()
    )
    return {"success": True, "data": serialize(review)}


@router.put("/reviews/{review_id}", dependencies=[Depends(reviewer_or_admin)], summary="Update review")
async def update_review(
    payload: ReviewUpdate,
    review: ReviewModel = Depends(owned_review),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    review = await CatalogService(uow).update_review(review, payload.changes())
    return {"success": True, "data": serialize(review)}


@router.delete(
    "/reviews/{review_id}", dependencies=[Depends(reviewer_or_admin)], summary="Delete review"
)
async def delete_review(
    review: ReviewModel = Depends(owned_review),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    await CatalogService(uow).delete_review(review)
    return {"success": True, "data": {}}
