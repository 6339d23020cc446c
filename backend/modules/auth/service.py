"""
Authentication service implementation.

Combines the user service with the token service: login, registration,
refresh, password change and token introspection.
"""

import logging
from datetime import datetime, timezone

from modules.users.interfaces import IUserService
from modules.users.models import UserCreate
from shared.models import AuthenticatedUser

from .exceptions import IncorrectPasswordError
from .interfaces import IAuthService
from .models import (
    AuthUserSummary,
    ChangePasswordRequest,
    IssuedToken,
    LoginResponse,
    PasswordStrength,
    RefreshResponse,
    RegisterRequest,
    TokenInfo,
)
from .policy import evaluate_password_strength
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Tokens are stateless. Logout is an audit event only; a token stays
    usable until it expires.
    """

    def __init__(self, users: IUserService, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    @staticmethod
    def _session(user, issued: IssuedToken) -> LoginResponse:
        return LoginResponse(
            user=AuthUserSummary.from_user(user),
            token=issued.token,
            token_type=issued.token_type,
            expires_in=issued.expires_in,
            expires_at=issued.expires_at,
        )

    async def login(self, email: str, password: str) -> LoginResponse:
        user = await self._users.authenticate_user(email, password)
        issued = self._tokens.issue(user.id, user.email)
        logger.info("User %s logged in", user.id)
        return self._session(user, issued)

    async def register(self, request: RegisterRequest) -> LoginResponse:
        user = await self._users.create_user(UserCreate(**request.model_dump()))
        issued = self._tokens.issue(user.id, user.email)
        return self._session(user, issued)

    async def logout(self, token: str) -> None:
        identity = self._tokens.authenticate(token)
        logger.info("User %s (%s) logged out", identity.id, identity.email)

    async def refresh_token(self, token: str) -> RefreshResponse:
        issued = await self._tokens.refresh(token, self._users.is_active)
        return RefreshResponse(
            token=issued.token,
            token_type=issued.token_type,
            expires_in=issued.expires_in,
            expires_at=issued.expires_at,
        )

    async def change_password(self, user_id: str, request: ChangePasswordRequest) -> None:
        if not await self._users.check_password(user_id, request.current_password):
            logger.info("Password change refused for user %s", user_id)
            raise IncorrectPasswordError()
        await self._users.change_password(user_id, request.new_password)

    def authenticate(self, token: str) -> AuthenticatedUser:
        return self._tokens.authenticate(token)

    def get_token_info(self, token: str) -> TokenInfo:
        claims = self._tokens.decode_unverified(token)
        if claims is None:
            return TokenInfo()

        now = self._tokens.now().timestamp()
        return TokenInfo(
            user_id=claims.sub,
            email=claims.email,
            iat=claims.iat,
            exp=claims.exp,
            is_valid=self._tokens.verify(token).is_valid,
            is_expired=now >= claims.exp,
            expires_at=datetime.fromtimestamp(claims.exp, tz=timezone.utc),
        )

    def validate_password_strength(self, password: str) -> PasswordStrength:
        return evaluate_password_strength(password)
