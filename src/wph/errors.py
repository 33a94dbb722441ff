"""Domain error taxonomy and its single mapping to HTTP status codes.

Services raise these instead of HTTPException so the same logical failure maps
to the same status no matter which endpoint surfaces it.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base class for expected, user-facing failures."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AppError):
    """A required field is missing or a value is malformed."""

    default_message = "Invalid request"


class AuthenticationRequired(AppError):
    """No valid session accompanies the request."""

    default_message = "Authentication required"


class PermissionDenied(AppError):
    """The caller is authenticated but not allowed to do this."""

    default_message = "Forbidden"


class NotFound(AppError):
    """Unknown category, user, project or review target."""

    default_message = "Not found"


class Conflict(AppError):
    """A unique key is already taken."""

    default_message = "Resource already exists"


class UpstreamError(AppError):
    """The backing store failed or is not set up; never retried."""

    default_message = INTERNAL_ERROR_MESSAGE


_STATUS_BY_ERROR: dict[type[Exception], int] = {
    ValidationFailed: 400,
    AuthenticationRequired: 401,
    PermissionDenied: 403,
    NotFound: 404,
    Conflict: 409,
    UpstreamError: 500,
    IntegrityError: 409,
    SQLAlchemyError: 500,
}


def status_for(exc: Exception) -> int:
    """Return the HTTP status for an exception, walking its MRO.

    Anything outside the taxonomy is a 500.
    """
    for cls in type(exc).__mro__:
        status = _STATUS_BY_ERROR.get(cls)
        if status is not None:
            return status
    return 500


def public_message(exc: Exception) -> str:
    """Message safe to show to the client for a given exception."""
    status = status_for(exc)
    if isinstance(exc, AppError) and status != 500:
        return exc.message
    if isinstance(exc, IntegrityError):
        return Conflict.default_message
    return INTERNAL_ERROR_MESSAGE
