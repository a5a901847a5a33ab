"""Typed error taxonomy for API outcomes.

Learn: Services raise these instead of HTTPException so business logic
stays framework-free. The exception handlers in
``gatehouse.middleware.error_handler`` render every AppError as
``{"code": ..., "message": ...}`` with the class's status code.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP outcome."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "internal server error"
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class BadRequestError(AppError):
    """Malformed body or failed field validation."""

    status_code = 400
    code = "BAD_REQUEST"
    default_message = "bad request"


class UnauthenticatedError(AppError):
    """Missing, invalid or expired token."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsError(UnauthenticatedError):
    """Unknown email or wrong password — deliberately indistinguishable."""

    code = "INVALID_CREDENTIALS"
    default_message = "invalid email or password"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "conflict"


class EmailAlreadyExistsError(ConflictError):
    code = "EMAIL_EXISTS"
    default_message = "email already exists"


class InternalError(AppError):
    """Store, hashing or signing failure not attributable to the caller."""
