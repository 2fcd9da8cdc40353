"""Request dependencies: database access, identity resolution and access policies.

Policies are composed when routes are declared: ``require_roles`` gates on the
requester's role and ``owned_resource`` loads a record and applies the
owner-or-admin rule before the handler runs.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable

import structlog
from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.core.auth import Role, TokenError, decode_access_token
from src.core.config import get_settings
from src.core.errors import RESOURCE_NOT_FOUND, Forbidden, NotFound, OwnershipDenied, Unauthorized
from src.domain import User
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import UserModel
from src.infrastructure.db.session import get_session, get_session_factory
from src.infrastructure.repositories.aggregates import AggregateMaintainer
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that outlives the request session."""
    return get_session_factory()


def get_uow(
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_db_session_factory),  # noqa: B008
) -> UnitOfWork:
    """Unit of work whose post-commit callbacks run after the response is sent."""
    return UnitOfWork(
        session,
        maintainer=AggregateMaintainer(session_factory),
        dispatch=background_tasks.add_task,
    )


def parse_record_id(record_id: str) -> str:
    """Canonical id string; anything that is not a UUID is treated as not found."""
    try:
        return str(uuid.UUID(record_id))
    except (ValueError, AttributeError, TypeError) as exc:
        raise NotFound(RESOURCE_NOT_FOUND) from exc


async def _resolve_user(token: str | None, session: AsyncSession) -> User:
    if not token:
        await logger.ainfo("auth_denied", reason="missing_token")
        raise Unauthorized()

    try:
        user_id = decode_access_token(token)
    except TokenError as exc:
        await logger.ainfo("auth_denied", reason=str(exc))
        raise Unauthorized() from exc

    account = await session.get(UserModel, user_id)
    if account is None:
        await logger.ainfo("auth_denied", reason="unknown_subject", user_id=user_id)
        raise Unauthorized()

    return User(
        user_id=account.id,
        role=Role(account.role.value),
        email=account.email,
        name=account.name,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> User:
    """Resolve the authenticated account from an ``Authorization: Bearer`` header."""
    token = credentials.credentials if credentials else None
    return await _resolve_user(token, session)


async def get_session_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> User:
    """Like get_current_user, but falls back to the auth cookie."""
    token = credentials.credentials if credentials else None
    if token is None:
        token = request.cookies.get(get_settings().auth_cookie_name)
    return await _resolve_user(token, session)


def require_roles(*roles: Role) -> Callable[..., Awaitable[User]]:
    """Dependency factory enforcing that the authenticated user has one of the roles."""
    if not roles:
        raise ValueError("require_roles needs at least one role")
    allowed = frozenset(roles)

    async def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if user.role not in allowed:
            await logger.ainfo("role_denied", user_id=user.user_id, role=user.role.value)
            raise Forbidden.for_role(user.role.value)
        return user

    return dependency


def ensure_owner_or_admin(user: User, owner_id: str | None) -> None:
    if user.is_admin or user.owns(owner_id):
        return
    logger.info("ownership_denied", user_id=user.user_id, owner_id=owner_id)
    raise OwnershipDenied()


def owned_resource(
    model: type[Base],
    *,
    param: str,
    not_found: str,
) -> Callable[..., Awaitable[Base]]:
    """Dependency factory loading ``model`` by path parameter for an owner or an admin.

    ``not_found`` is formatted with ``id`` for well-formed ids that match nothing.
    """

    async def dependency(
        request: Request,
        user: User = Depends(get_current_user),  # noqa: B008
        session: AsyncSession = Depends(get_db_session),  # noqa: B008
    ) -> Base:
        record_id = parse_record_id(request.path_params[param])
        resource = await session.get(model, record_id)
        if resource is None:
            raise NotFound(not_found.format(id=record_id))
        ensure_owner_or_admin(user, resource.user_id)
        return resource

    return dependency
