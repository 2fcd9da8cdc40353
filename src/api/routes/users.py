"""Account administration (admin only)."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_uow, parse_record_id, require_roles
from src.api.listing import paginate, query_plan, serialize
from src.api.schemas.users import UserCreate, UserUpdate
from src.core.auth import Role, hash_password
from src.core.errors import NotFound
from src.domain import User
from src.domain.query import QueryPlan
from src.infrastructure.db.models import UserModel, UserRole
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()
admin_only = require_roles(Role.ADMIN)
router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(admin_only)])

USER_NOT_FOUND = "No user with the id of {id}"


async def _get_or_404(uow: UnitOfWork, user_id: str) -> UserModel:
    record_id = parse_record_id(user_id)
    account = await uow.users.get(record_id)
    if account is None:
        raise NotFound(USER_NOT_FOUND.format(id=record_id))
    return account


@router.get("", summary="List users")
async def list_users(
    plan: QueryPlan = Depends(query_plan),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await paginate(session, UserModel, plan)


@router.get("/{user_id}", summary="Get user")
async def get_user(user_id: str, uow: UnitOfWork = Depends(get_uow)) -> dict:
    return {"success": True, "data": serialize(await _get_or_404(uow, user_id))}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(
    payload: UserCreate,
    admin: User = Depends(admin_only),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    account = UserModel(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=UserRole(payload.role.value),
    )
    await uow.users.add(account)
    await uow.commit()

    await logger.ainfo("user_created", user_id=account.id, admin_user=admin.user_id)
    return {"success": True, "data": serialize(account)}


@router.put("/{user_id}", summary="Update user")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    admin: User = Depends(admin_only),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    account = await _get_or_404(uow, user_id)
    changes = payload.changes()
    if "role" in changes:
        changes["role"] = UserRole(changes["role"].value)
    await uow.users.update(account, changes)
    await uow.commit()

    await logger.ainfo(
        "user_updated", user_id=account.id, admin_user=admin.user_id, fields=sorted(changes)
    )
    return {"success": True, "data": serialize(account)}


@router.delete("/{user_id}", summary="Delete user")
async def delete_user(
    user_id: str,
    admin: User = Depends(admin_only),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    account = await _get_or_404(uow, user_id)
    await uow.users.delete(account)
    await uow.commit()

    await logger.ainfo("user_deleted", user_id=account.id, admin_user=admin.user_id)
    return {"success": True, "data": {}}
