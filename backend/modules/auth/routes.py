"""
Authentication API endpoints.

Login, registration, session refresh and token introspection.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_auth_service
from api.middleware.auth import get_bearer_token, get_current_user
from api.models import ApiResponse, ok
from shared.models import AuthenticatedUser

from .interfaces import IAuthService
from .models import (
    ChangePasswordRequest,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    PasswordCheckRequest,
    PasswordStrength,
    RefreshResponse,
    RegisterRequest,
    TokenInfo,
)

router = APIRouter()


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    request: LoginRequest,
    service: IAuthService = Depends(get_auth_service),
):
    """Log in with email and password."""
    session = await service.login(request.email, request.password)
    return ok(session, "Login successful")


@router.post("/register", response_model=ApiResponse[LoginResponse], status_code=201)
async def register(
    request: RegisterRequest,
    service: IAuthService = Depends(get_auth_service),
):
    """Create an account. The response already carries a session token."""
    session = await service.register(request)
    return ok(session, "Registration successful")


@router.post("/validate-password", response_model=ApiResponse[PasswordStrength])
async def validate_password(
    request: PasswordCheckRequest,
    service: IAuthService = Depends(get_auth_service),
):
    return ok(service.validate_password_strength(request.password), "Password strength evaluated")


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    token: str = Depends(get_bearer_token),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
):
    """
    Log out.

    Tokens are stateless, so this only records the event. The client must
    discard its token.
    """
    await service.logout(token)
    return ok(None, "Logout successful")


@router.post("/refresh-token", response_model=ApiResponse[RefreshResponse])
async def refresh_token(
    token: str = Depends(get_bearer_token),
    service: IAuthService = Depends(get_auth_service),
):
    """Exchange a still-valid token for a new one. Expired tokens are refused."""
    refreshed = await service.refresh_token(token)
    return ok(refreshed, "Token refreshed successfully")


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
    request: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
):
    """Change the caller's own password."""
    await service.change_password(user.id, request)
    return ok(None, "Password changed successfully")


@router.get("/me", response_model=ApiResponse[CurrentUserResponse])
async def me(user: AuthenticatedUser = Depends(get_current_user)):
    """Identity carried by the caller's token."""
    return ok(
        CurrentUserResponse(
            user_id=user.id,
            email=user.email,
            token_issued_at=user.issued_at,
            token_expires_at=user.expires_at,
        ),
        "Current user",
    )


@router.get("/token-info", response_model=ApiResponse[TokenInfo])
async def token_info(
    token: str = Depends(get_bearer_token),
    service: IAuthService = Depends(get_auth_service),
):
    """
    Describe the presented token.

    Informational only: the token is decoded even if its signature or
    expiry is bad, and is_valid reports the full verification result.
    """
    return ok(service.get_token_info(token), "Token information")
