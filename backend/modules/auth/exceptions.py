"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AccountsError, AuthenticationError, AuthorizationError


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed or its signature does not validate."""

    def __init__(self, message: str = "Access denied. Invalid token."):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a token has expired."""

    def __init__(self, message: str = "Access denied. Token has expired."):
        super().__init__(message, code="TOKEN_EXPIRED")


class TokenNotActiveError(AuthenticationError):
    """Raised when a token's not-before instant has not been reached."""

    def __init__(self, message: str = "Access denied. Token not active yet."):
        super().__init__(message, code="TOKEN_NOT_ACTIVE")


class MissingTokenError(AuthenticationError):
    """Raised when no bearer token is provided."""

    def __init__(self, message: str = "Access denied. No token provided."):
        super().__init__(message, code="NO_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """
    Raised for any failed email/password check.

    Used both for unknown emails and wrong passwords so callers cannot tell
    which one happened.
    """

    def __init__(self):
        super().__init__("Invalid email or password", code="INVALID_CREDENTIALS")


class AccountDeactivatedError(AuthenticationError):
    """Raised when a deactivated account tries to authenticate or refresh."""

    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else None
        super().__init__(
            "Account is deactivated",
            code="ACCOUNT_DEACTIVATED",
            details=details,
        )


class IncorrectPasswordError(AuthenticationError):
    """Raised when the current password given for a password change is wrong."""

    def __init__(self):
        super().__init__(
            "Current password is incorrect",
            code="INVALID_CURRENT_PASSWORD",
        )


class ResourceOwnershipError(AuthorizationError):
    """Raised when a user acts on a resource owned by someone else."""

    def __init__(self, user_id: str, resource_owner_id: str):
        super().__init__(
            "Access denied. You can only access your own resources.",
            code="FORBIDDEN_RESOURCE",
            details={"user_id": user_id, "resource_owner_id": resource_owner_id},
        )


class TokenConfigurationError(AccountsError):
    """Raised when tokens cannot be issued or checked because no secret is set."""

    def __init__(self):
        super().__init__(
            "Token signing secret is not configured",
            code="TOKEN_CONFIG_ERROR",
        )


class CredentialHashingError(AccountsError):
    """Raised when a password could not be hashed."""

    def __init__(self):
        super().__init__("Failed to process credentials", code="HASHING_FAILED")
