"""
User module interfaces.

IUserRepository is the storage contract both the Supabase and the in-memory
adapters satisfy. IUserService is what the auth module and the routes
depend on.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import (
    User,
    UserCreate,
    UserCredentials,
    UserListResponse,
    UserPage,
    UserQuery,
    UserResponse,
    UserStats,
    UserUpdate,
)


@runtime_checkable
class IUserRepository(Protocol):
    """
    Synchronous storage contract for user records.

    Lookups return None instead of raising when nothing matches. Only
    find_by_email_for_auth exposes the password hash. Unless a method says
    otherwise, inactive (soft-deleted) records are invisible.
    """

    def create(self, data: UserCreate) -> User:
        """
        Hash the password and insert a new active record.

        Raises:
            DuplicateEmailError: If an active record already uses the email
        """
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_email_for_auth(self, email: str) -> Optional[UserCredentials]:
        """
        Look up a record with its password hash.

        Inactive records are included (an active one is preferred) so the
        caller can report a deactivated account.
        """
        ...

    def find_by_id_including_inactive(self, user_id: str) -> Optional[User]:
        """Raw lookup that ignores the active flag. For audit checks."""
        ...

    def list_users(self, query: UserQuery) -> UserPage:
        ...

    def update(self, user_id: str, changes: dict) -> Optional[User]:
        """
        Apply only the given fields and refresh updated_at.

        Raises:
            DuplicateEmailError: If the new email is taken
        """
        ...

    def soft_delete(self, user_id: str) -> bool:
        """Mark the record inactive. False if no active record matched."""
        ...

    def change_password(self, user_id: str, password_hash: str) -> bool:
        ...

    def verify_email(self, user_id: str) -> bool:
        ...

    def update_last_login(self, user_id: str) -> None:
        ...

    def count_active(self) -> int:
        ...

    def count_verified(self) -> int:
        ...

    def find_recently_created(self, hours: int = 24) -> list[User]:
        ...


@runtime_checkable
class IUserService(Protocol):
    """Business operations on user accounts."""

    async def create_user(self, data: UserCreate) -> UserResponse:
        ...

    async def get_user_by_id(self, user_id: str) -> UserResponse:
        ...

    async def get_user_by_email(self, email: str) -> UserResponse:
        ...

    async def get_user_profile(self, user_id: str) -> UserResponse:
        ...

    async def get_all_users(self, query: UserQuery) -> UserListResponse:
        ...

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResponse:
        ...

    async def delete_user(self, user_id: str) -> None:
        ...

    async def authenticate_user(self, email: str, password: str) -> UserResponse:
        ...

    async def check_password(self, user_id: str, password: str) -> bool:
        ...

    async def change_password(self, user_id: str, new_password: str) -> None:
        ...

    async def verify_email(self, user_id: str) -> None:
        ...

    async def is_active(self, user_id: str) -> bool:
        ...

    async def get_user_stats(self) -> UserStats:
        ...
