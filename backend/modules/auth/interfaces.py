"""
Authentication module interface.

Routes and the access-control dependencies depend on IAuthService, not the
concrete implementation, so tests can substitute a mock.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import (
    ChangePasswordRequest,
    LoginResponse,
    PasswordStrength,
    RefreshResponse,
    RegisterRequest,
    TokenInfo,
)


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for session and credential operations.

    Implementations must provide all these methods.
    """

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Authenticate with email and password and start a session.

        Raises:
            InvalidCredentialsError: If the email/password pair is wrong
            AccountDeactivatedError: If the account is deactivated
        """
        ...

    async def register(self, request: RegisterRequest) -> LoginResponse:
        """
        Create an account and start a session for it.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        ...

    async def logout(self, token: str) -> None:
        """Record a logout. Tokens stay valid until they expire."""
        ...

    async def refresh_token(self, token: str) -> RefreshResponse:
        """
        Exchange a valid token for a fresh one.

        Raises:
            ExpiredTokenError, InvalidTokenError, TokenNotActiveError
            AccountDeactivatedError: If the user was deactivated since
        """
        ...

    async def change_password(self, user_id: str, request: ChangePasswordRequest) -> None:
        """
        Change the caller's own password after checking the current one.

        Raises:
            IncorrectPasswordError: If current_password does not match
        """
        ...

    def authenticate(self, token: str) -> AuthenticatedUser:
        """
        Verify a bearer token. Stateless; no database lookup.

        Raises:
            InvalidTokenError, ExpiredTokenError, TokenNotActiveError
        """
        ...

    def get_token_info(self, token: str) -> TokenInfo:
        """Describe a token without authorizing anything with it."""
        ...

    def validate_password_strength(self, password: str) -> PasswordStrength:
        ...
