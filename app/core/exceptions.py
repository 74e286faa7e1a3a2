"""
Application error taxonomy.

Services and dependencies raise these; app.core.exception_handlers turns
them into the uniform error envelope. Messages are safe to show to clients.
"""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import status


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    """
    Base class for errors that map to an HTTP response.

    Attributes:
        status_code: HTTP status returned to the client
        message: Human-readable message for the envelope
        errors: Optional field-level details
        headers: Optional extra response headers
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[FieldError]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status_code, "message": self.message}
        if self.errors:
            body["errors"] = [e.to_dict() for e in self.errors]
        return body


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class ValidationFailedError(AppError):
    """Raised when one or more fields violate their constraints."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: Optional[str] = None) -> None:
        super().__init__(message, errors=errors)


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
