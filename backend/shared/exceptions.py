"""
Base exception classes for the Accounts backend.

Each module should define its own exceptions that inherit from these bases.
The API layer picks an HTTP status from the base class, so modules must
raise (or re-raise unchanged) the most specific kind they know about.
"""

from typing import Optional, Any


class AccountsError(Exception):
    """
    Base exception for all Accounts errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(AccountsError):
    """Resource not found."""

    pass


class ValidationError(AccountsError):
    """Input validation failed."""

    pass


class ConflictError(AccountsError):
    """Request conflicts with existing state (e.g., a duplicate key)."""

    pass


class AuthenticationError(AccountsError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(AccountsError):
    """Authorization failed (insufficient permissions)."""

    pass


class ExternalServiceError(AccountsError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class StorageUnavailableError(ExternalServiceError):
    """The backing store could not be reached."""

    def __init__(self, message: str = "Storage temporarily unavailable"):
        super().__init__(message, service="database", code="STORAGE_UNAVAILABLE")


class StorageError(AccountsError):
    """The backing store rejected an operation for an unrecognized reason."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, code="STORAGE_ERROR")
