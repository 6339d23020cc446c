"""
Authentication module.

Handles session tokens, password hashing and strength scoring, and the
login / registration / refresh flows.

Public API:
- IAuthService: Interface for auth operations
- PasswordHasher, TokenService: Credential and token primitives
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService
from .hashing import PasswordHasher
from .tokens import TokenService
from .models import (
    TokenClaims,
    TokenVerification,
    VerificationFailure,
    IssuedToken,
    TokenInfo,
    PasswordStrength,
    LoginResponse,
    RefreshResponse,
)
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    TokenNotActiveError,
    MissingTokenError,
    InvalidCredentialsError,
    AccountDeactivatedError,
    IncorrectPasswordError,
    ResourceOwnershipError,
    TokenConfigurationError,
    CredentialHashingError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Primitives
    "PasswordHasher",
    "TokenService",
    # Models
    "TokenClaims",
    "TokenVerification",
    "VerificationFailure",
    "IssuedToken",
    "TokenInfo",
    "PasswordStrength",
    "LoginResponse",
    "RefreshResponse",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "TokenNotActiveError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "AccountDeactivatedError",
    "IncorrectPasswordError",
    "ResourceOwnershipError",
    "TokenConfigurationError",
    "CredentialHashingError",
]
