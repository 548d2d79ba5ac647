"""
Custom exception classes for the application.

Every exception raised by the catalog layer derives from ``AppException``.
Each carries an HTTP status, a machine-readable ``code`` and an
``extensions`` mapping. GraphQL copies ``extensions`` from the original
exception into the error it reports, so clients receive structured,
recoverable errors.
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for plain HTTP responses.
        code: Machine-readable error code exposed to GraphQL clients.
    """

    http_status: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def extensions(self) -> dict[str, Any]:
        """Structured error details attached to the GraphQL error."""
        return {"code": self.code}


class ValidationError(AppException):
    """
    Bad input or store constraint violation.

    Always carries the rejected arguments so callers can tell which input
    was refused.

    HTTP Status: 400 Bad Request
    """

    http_status = 400
    code = "BAD_USER_INPUT"

    def __init__(
        self, message: str, invalid_args: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.invalid_args = invalid_args or {}

    @property
    def extensions(self) -> dict[str, Any]:
        return {"code": self.code, "invalidArgs": self.invalid_args}


class AuthError(AppException):
    """
    Base class for authentication failures.

    HTTP Status: 401 Unauthorized
    """

    http_status = 401
    code = "UNAUTHENTICATED"


class UnauthenticatedError(AuthError):
    """Missing credential on an operation that requires one."""

    code = "UNAUTHENTICATED"


class InvalidCredentialsError(AuthError):
    """
    Login failed.

    Raised for an unknown username and for a wrong password alike, so the
    caller cannot tell the two apart.
    """

    code = "INVALID_CREDENTIALS"


class InvalidTokenError(AuthError):
    """Bearer token is malformed, expired or carries a bad signature."""

    code = "INVALID_TOKEN"


class DanglingReferenceError(AppException):
    """
    A stored reference no longer resolves to a live record.

    Raised instead of returning a partially-populated entity when a book
    points at an author that does not exist.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500
    code = "DANGLING_REFERENCE"

    def __init__(self, entity: str, reference_id: Any):
        super().__init__(
            f"{entity} with id {reference_id} referenced but not found"
        )
        self.entity = entity
        self.reference_id = reference_id

    @property
    def extensions(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "entity": self.entity,
            "referenceId": str(self.reference_id),
        }


class DatabaseError(AppException):
    """
    Database operation failed.

    Raised when a database operation encounters an error that should be
    handled at the application level.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500
    code = "DATABASE_ERROR"
