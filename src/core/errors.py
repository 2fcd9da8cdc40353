"""Typed failures surfaced to the HTTP boundary.

Each kind carries the status code and message the boundary translator writes
into the `{"success": false, "error": ...}` envelope.
"""

from __future__ import annotations

from fastapi import status

NOT_AUTHORIZED = "Not authorized to access this route"
DUPLICATE_VALUE = "Duplicate field value entered"
RESOURCE_NOT_FOUND = "Resource not found"


class AppError(Exception):
    """Base class for failures with a stable status code and public message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = NOT_AUTHORIZED


class Forbidden(AppError):
    """Authenticated, but the role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = NOT_AUTHORIZED

    @classmethod
    def for_role(cls, role: str) -> Forbidden:
        return cls(f"User role {role} is not authorized to access this route")


class OwnershipDenied(Forbidden):
    """Requester neither owns the record nor holds the admin role.

    Existing clients expect 401 here rather than 403.
    """

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = RESOURCE_NOT_FOUND


class Conflict(AppError):
    """Uniqueness violation. Existing clients expect 400."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = DUPLICATE_VALUE


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InternalFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server Error"
