"""Boundary translator: every failure leaves as ``{"success": false, "error": ...}``."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from src.core.errors import DUPLICATE_VALUE, AppError, Conflict, InternalFailure

logger = structlog.get_logger()


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        prefix = ".".join(location)
        messages.append(f"{prefix}: {error['msg']}" if prefix else error["msg"])
    return ", ".join(messages) or "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    await logger.awarning("integrity_conflict", error=str(exc.orig).split("\n")[0])
    return error_response(Conflict.status_code, DUPLICATE_VALUE)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await logger.aexception("unhandled_error", error_type=type(exc).__name__)
    return error_response(InternalFailure.status_code, InternalFailure.default_message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
