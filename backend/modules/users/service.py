"""
User service implementation.

Business rules on top of the user store: id format, minimum age, email
uniqueness, credential checks and response shaping. Store calls and bcrypt
work are blocking, so they run in Starlette's threadpool.
"""

import logging
import re
from datetime import date
from typing import Optional

from starlette.concurrency import run_in_threadpool

from modules.auth.exceptions import AccountDeactivatedError, InvalidCredentialsError
from modules.auth.hashing import PasswordHasher

from .exceptions import DuplicateEmailError, InvalidUserIdError, UnderageError, UserNotFoundError
from .interfaces import IUserRepository, IUserService
from .models import (
    User,
    UserCreate,
    UserListResponse,
    UserQuery,
    UserResponse,
    UserStats,
    UserUpdate,
    years_between,
)

logger = logging.getLogger(__name__)

MINIMUM_AGE = 13
RECENT_WINDOW_HOURS = 24

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def validate_user_id(user_id: str) -> str:
    """
    Reject ids that are not UUIDs before they reach storage.

    Raises:
        InvalidUserIdError: If the id is not a version 1-5 UUID
    """
    if not user_id or not _UUID_PATTERN.match(user_id):
        raise InvalidUserIdError(user_id)
    return user_id


def check_minimum_age(date_of_birth: Optional[date], today: Optional[date] = None) -> None:
    if date_of_birth is None:
        return
    if years_between(date_of_birth, today or date.today()) < MINIMUM_AGE:
        raise UnderageError(MINIMUM_AGE)


class UserService(IUserService):
    """
    Implementation of the user service.

    Args:
        repository: Any IUserRepository (Supabase or in-memory)
        hasher: Hasher used for password checks and password changes
    """

    def __init__(self, repository: IUserRepository, hasher: PasswordHasher):
        self._repo = repository
        self._hasher = hasher

    @staticmethod
    def to_response(user: User) -> UserResponse:
        return UserResponse.from_user(user)

    async def _require_user(self, user_id: str) -> User:
        validate_user_id(user_id)
        user = await run_in_threadpool(self._repo.find_by_id, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # -------------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------------

    async def create_user(self, data: UserCreate) -> UserResponse:
        """
        Register a new account.

        Raises:
            DuplicateEmailError: If the email is already in use, including
                when a concurrent registration wins the race
            UnderageError: If the user is younger than 13
        """
        existing = await run_in_threadpool(self._repo.find_by_email, data.email)
        if existing is not None:
            raise DuplicateEmailError()

        check_minimum_age(data.date_of_birth)

        user = await run_in_threadpool(self._repo.create, data)
        logger.info("Registered user %s", user.id)
        return self.to_response(user)

    async def get_user_by_id(self, user_id: str) -> UserResponse:
        return self.to_response(await self._require_user(user_id))

    async def get_user_by_email(self, email: str) -> UserResponse:
        user = await run_in_threadpool(self._repo.find_by_email, email)
        if user is None:
            raise UserNotFoundError(email)
        return self.to_response(user)

    async def get_user_profile(self, user_id: str) -> UserResponse:
        return await self.get_user_by_id(user_id)

    async def get_all_users(self, query: UserQuery) -> UserListResponse:
        page = await run_in_threadpool(self._repo.list_users, query)
        return UserListResponse(
            users=[self.to_response(u) for u in page.items],
            total=page.total,
            total_pages=page.total_pages,
            page=query.page,
            limit=query.limit,
        )

    async def is_active(self, user_id: str) -> bool:
        user = await run_in_threadpool(self._repo.find_by_id, user_id)
        return user is not None and user.is_active

    async def get_user_stats(self) -> UserStats:
        total_active = await run_in_threadpool(self._repo.count_active)
        recent = await run_in_threadpool(self._repo.find_recently_created, RECENT_WINDOW_HOURS)
        verified = await run_in_threadpool(self._repo.count_verified)
        return UserStats(
            total_active=total_active,
            recent_users=len(recent),
            verified_users=verified,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResponse:
        """
        Apply a partial profile update.

        Raises:
            UserNotFoundError, DuplicateEmailError, UnderageError
        """
        current = await self._require_user(user_id)
        changes = data.changes()

        new_email = changes.get("email")
        if new_email and new_email != current.email:
            holder = await run_in_threadpool(self._repo.find_by_email, new_email)
            if holder is not None and holder.id != user_id:
                raise DuplicateEmailError()

        if "date_of_birth" in changes:
            check_minimum_age(changes["date_of_birth"])

        user = await run_in_threadpool(self._repo.update, user_id, changes)
        if user is None:
            raise UserNotFoundError(user_id)
        return self.to_response(user)

    async def delete_user(self, user_id: str) -> None:
        validate_user_id(user_id)
        if not await run_in_threadpool(self._repo.soft_delete, user_id):
            raise UserNotFoundError(user_id)
        logger.info("Deactivated user %s", user_id)

    async def change_password(self, user_id: str, new_password: str) -> None:
        """
        Store a new password. The only path that hashes outside of create.

        The caller is responsible for having checked the current password.
        """
        validate_user_id(user_id)
        password_hash = await run_in_threadpool(self._hasher.hash, new_password)
        if not await run_in_threadpool(self._repo.change_password, user_id, password_hash):
            raise UserNotFoundError(user_id)
        logger.info("Password changed for user %s", user_id)

    async def verify_email(self, user_id: str) -> None:
        validate_user_id(user_id)
        if not await run_in_threadpool(self._repo.verify_email, user_id):
            raise UserNotFoundError(user_id)

    # -------------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------------

    async def authenticate_user(self, email: str, password: str) -> UserResponse:
        """
        Check an email/password pair and record the login.

        Unknown email and wrong password fail identically, and take the
        same bcrypt work.

        Raises:
            InvalidCredentialsError: If the pair does not match
            AccountDeactivatedError: If the password matches a deactivated account
        """
        record = await run_in_threadpool(self._repo.find_by_email_for_auth, email)
        if record is None:
            # Same bcrypt cost as a wrong password
            matches = await run_in_threadpool(self._hasher.verify_decoy, password)
        else:
            matches = await run_in_threadpool(self._hasher.verify, password, record.password_hash)
        if record is None or not matches:
            logger.info("Failed login for %s", email)
            raise InvalidCredentialsError()

        if not record.is_active:
            raise AccountDeactivatedError(record.id)

        await run_in_threadpool(self._repo.update_last_login, record.id)
        user = await run_in_threadpool(self._repo.find_by_id, record.id)
        return self.to_response(user or record.to_user())

    async def check_password(self, user_id: str, password: str) -> bool:
        """Whether password matches the active user's stored hash."""
        user = await self._require_user(user_id)
        record = await run_in_threadpool(self._repo.find_by_email_for_auth, user.email)
        if record is None or record.id != user.id:
            return False
        return await run_in_threadpool(self._hasher.verify, password, record.password_hash)
