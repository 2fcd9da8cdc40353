"""Authentication routes - register, login, logout, profile and password."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from src.api.deps import get_session_user, get_uow
from src.api.listing import serialize
from src.api.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)
from src.core.config import get_settings
from src.domain import User
from src.domain.services.auth_service import AuthService
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


def token_response(token: str, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Return the token in the body and as an HTTP-only cookie."""
    settings = get_settings()
    response = JSONResponse(status_code=status_code, content={"success": True, "token": token})
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return response


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create an account as a user or publisher and receive a token.",
)
async def register(
    payload: RegisterRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> JSONResponse:
    """Register a new user."""
    _, token = await AuthService(uow).register_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role.value,
    )
    return token_response(token, status.HTTP_201_CREATED)


@router.post("/login", summary="User login")
async def login(
    payload: LoginRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> JSONResponse:
    """Authenticate user and return a token."""
    _, token = await AuthService(uow).login(email=payload.email, password=payload.password)
    return token_response(token)


@router.get("/logout", summary="Log out")
async def logout(user: User = Depends(get_session_user)) -> JSONResponse:
    """Clear the auth cookie."""
    response = JSONResponse(content={"success": True, "data": {}})
    response.delete_cookie(get_settings().auth_cookie_name)
    await logger.ainfo("logout", user_id=user.user_id)
    return response


@router.get("/me", summary="Get current user")
async def get_me(
    user: User = Depends(get_session_user),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    """Get the currently authenticated account."""
    account = await AuthService(uow).get_user(user.user_id)
    return {"success": True, "data": serialize(account)}


@router.put("/updatedetails", summary="Update name or email")
async def update_details(
    payload: UpdateDetailsRequest,
    user: User = Depends(get_session_user),
    uow: UnitOfWork = Depends(get_uow),
) -> dict:
    account = await AuthService(uow).update_details(user.user_id, payload.changes())
    return {"success": True, "data": serialize(account)}


@router.put("/updatepassword", summary="Change password")
async def update_password(
    payload: UpdatePasswordRequest,
    user: User = Depends(get_session_user),
    uow: UnitOfWork = Depends(get_uow),
) -> JSONResponse:
    """Change the current user's password and issue a new token."""
    token = await AuthService(uow).change_password(
        user_id=user.user_id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return token_response(token)
