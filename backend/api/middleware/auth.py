"""
Bearer token access control.

FastAPI dependencies that verify the session token and attach the identity
to the request. The check is stateless: no database lookup happens here, so
a deactivated user's token passes until it expires.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from modules.auth.exceptions import MissingTokenError, ResourceOwnershipError
from modules.auth.tokens import TokenService, failure_to_error
from shared.models import AuthenticatedUser

from ..dependencies import get_token_service

logger = logging.getLogger(__name__)

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


def _verify(token: str, tokens: TokenService) -> AuthenticatedUser:
    verification = tokens.verify(token)
    if not verification.is_valid:
        logger.debug("Token rejected: %s", verification.failure.value)
        raise failure_to_error(verification)
    return verification.identity


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Dependency returning the raw bearer token, or 401 NO_TOKEN."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return credentials.credentials


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    user = _verify(credentials.credentials, tokens)
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[AuthenticatedUser]:
    """
    Dependency that extracts the user if a token is sent.

    No header means anonymous. A header with a bad token is still rejected.
    """
    if credentials is None:
        return None

    user = _verify(credentials.credentials, tokens)
    request.state.user = user
    return user


def require_ownership(param: str = "user_id"):
    """
    Build a dependency that only lets users act on their own resources.

    The owner id is read from the path parameter named by param.

    Usage:
        @router.put("/{user_id}", dependencies=[Depends(require_ownership())])
    """

    async def check_ownership(
        request: Request,
        user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        owner_id = request.path_params.get(param)
        if owner_id != user.id:
            logger.info("User %s denied access to resource of %s", user.id, owner_id)
            raise ResourceOwnershipError(user.id, owner_id)
        return user

    return check_ownership


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
