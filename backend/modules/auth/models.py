"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from modules.users.models import NormalizedEmail, NameStr, PasswordStr, UserResponse
from shared.models import AuthenticatedUser


TOKEN_TYPE = "Bearer"


class TokenClaims(BaseModel):
    """
    Decoded session token payload.

    Both sub and email are required; a payload missing either one is
    treated as malformed.
    """

    sub: str = Field(..., min_length=1, description="Subject (user ID)")
    email: str = Field(..., min_length=1, description="Subject email")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")
    nbf: Optional[int] = Field(None, description="Not-before timestamp")
    iss: Optional[str] = Field(None, description="Issuer")
    aud: Optional[str] = Field(None, description="Audience")


class VerificationFailure(str, Enum):
    """Why a token failed verification."""

    EXPIRED = "expired"
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    NOT_YET_VALID = "not_yet_valid"


class TokenVerification(BaseModel):
    """
    Outcome of verifying a token.

    Exactly one of identity / failure is set.
    """

    identity: Optional[AuthenticatedUser] = None
    failure: Optional[VerificationFailure] = None
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.identity is not None


class IssuedToken(BaseModel):
    """A freshly signed session token."""

    token: str
    token_type: str = TOKEN_TYPE
    expires_in: int = Field(..., description="Lifetime in seconds")
    expires_at: datetime


class TokenInfo(BaseModel):
    """Introspection view of a token. Informational only."""

    user_id: str = ""
    email: str = ""
    iat: Optional[int] = None
    exp: Optional[int] = None
    is_valid: bool = False
    is_expired: bool = True
    expires_at: Optional[datetime] = None


class PasswordStrength(BaseModel):
    """Heuristic password strength score."""

    is_valid: bool
    score: int = Field(..., ge=0, le=5)
    suggestions: list[str] = Field(default_factory=list, max_length=3)


class AuthUserSummary(BaseModel):
    """User fields returned with a session token."""

    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    is_active: bool
    is_email_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: UserResponse) -> "AuthUserSummary":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            is_active=user.is_active,
            is_email_verified=user.is_email_verified,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )


class LoginResponse(BaseModel):
    """Authenticated session: the user plus a bearer token."""

    user: AuthUserSummary
    token: str
    token_type: str = TOKEN_TYPE
    expires_in: int
    expires_at: datetime


class RefreshResponse(BaseModel):
    token: str
    token_type: str = TOKEN_TYPE
    expires_in: int
    expires_at: datetime


class CurrentUserResponse(BaseModel):
    user_id: str
    email: str
    token_issued_at: Optional[datetime] = None
    token_expires_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request to log in with email and password."""

    model_config = {"extra": "forbid"}

    email: NormalizedEmail
    password: str = Field(..., min_length=1, max_length=255)


class RegisterRequest(BaseModel):
    """Request to register a new account and start a session."""

    model_config = {"extra": "forbid"}

    email: NormalizedEmail
    password: PasswordStr
    first_name: NameStr
    last_name: NameStr


class ChangePasswordRequest(BaseModel):
    """Request to change the caller's own password."""

    model_config = {"extra": "forbid"}

    current_password: str = Field(..., min_length=1)
    new_password: PasswordStr
    confirm_password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_passwords(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        if self.current_password == self.new_password:
            raise ValueError("New password must be different from current password")
        return self


class PasswordCheckRequest(BaseModel):
    password: str = Field(..., min_length=1)

