"""
User API endpoints.

Account CRUD, listing and statistics. Routes that act on a specific
account by id are restricted to that account's owner.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_auth_service, get_user_service
from api.middleware.auth import get_current_user, require_ownership
from api.models import ApiResponse, ok
from modules.auth.interfaces import IAuthService
from modules.auth.models import ChangePasswordRequest, LoginRequest, LoginResponse
from shared.models import AuthenticatedUser

from .interfaces import IUserService
from .models import (
    Gender,
    SortField,
    SortOrder,
    UserCreate,
    UserListResponse,
    UserQuery,
    UserResponse,
    UserStats,
    UserUpdate,
)

router = APIRouter()

owner_only = require_ownership("user_id")


def get_user_query(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(default=10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(default=None, max_length=255),
    is_active: Optional[bool] = Query(default=None),
    gender: Optional[Gender] = Query(default=None),
    sort_by: SortField = Query(default=SortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
) -> UserQuery:
    return UserQuery(
        page=page,
        limit=limit,
        search=search,
        is_active=is_active,
        gender=gender,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("", response_model=ApiResponse[UserResponse], status_code=201)
async def create_user(
    request: UserCreate,
    service: IUserService = Depends(get_user_service),
):
    """Create a user account without starting a session."""
    return ok(await service.create_user(request), "User created successfully")


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    request: LoginRequest,
    auth: IAuthService = Depends(get_auth_service),
):
    return ok(await auth.login(request.email, request.password), "Login successful")


@router.get("", response_model=ApiResponse[UserListResponse])
async def list_users(
    query: UserQuery = Depends(get_user_query),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
):
    """
    List users.

    Active users only unless is_active is given. Newest first by default.
    """
    return ok(await service.get_all_users(query), "Users retrieved successfully")


@router.get("/stats", response_model=ApiResponse[UserStats])
async def user_stats(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
):
    return ok(await service.get_user_stats(), "User statistics retrieved successfully")


@router.get("/profile/{user_id}", response_model=ApiResponse[UserResponse])
async def get_profile(
    user_id: str,
    user: AuthenticatedUser = Depends(owner_only),
    service: IUserService = Depends(get_user_service),
):
    """The caller's own profile."""
    return ok(await service.get_user_profile(user_id), "Profile retrieved successfully")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
):
    return ok(await service.get_user_by_id(user_id), "User retrieved successfully")


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    request: UserUpdate,
    user: AuthenticatedUser = Depends(owner_only),
    service: IUserService = Depends(get_user_service),
):
    """Update the caller's profile. Only the fields sent are changed."""
    return ok(await service.update_user(user_id, request), "User updated successfully")


@router.put("/{user_id}/password", response_model=ApiResponse[None])
async def change_password(
    user_id: str,
    request: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(owner_only),
    auth: IAuthService = Depends(get_auth_service),
):
    await auth.change_password(user_id, request)
    return ok(None, "Password changed successfully")


@router.put("/{user_id}/verify-email", response_model=ApiResponse[None])
async def verify_email(
    user_id: str,
    user: AuthenticatedUser = Depends(owner_only),
    service: IUserService = Depends(get_user_service),
):
    await service.verify_email(user_id)
    return ok(None, "Email verified successfully")


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: str,
    user: AuthenticatedUser = Depends(owner_only),
    service: IUserService = Depends(get_user_service),
):
    """Deactivate the caller's account. The record is kept, not erased."""
    await service.delete_user(user_id)
    return ok(None, "User deleted successfully")
