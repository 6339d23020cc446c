"""
User repository for database access.

Encapsulates all Supabase queries and row mapping for the users table.
The table carries a partial unique index on lower(email) where is_active,
which is the final arbiter for concurrent registrations.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterator, Optional

from postgrest.exceptions import APIError
from supabase import Client

from modules.auth.hashing import PasswordHasher
from shared.repository import BaseRepository

from .exceptions import DuplicateEmailError
from .models import User, UserCreate, UserCredentials, UserPage, UserQuery, SortOrder

logger = logging.getLogger(__name__)

# Every column except password_hash
USER_COLUMNS = (
    "id,email,first_name,last_name,date_of_birth,gender,phone,is_active,"
    "is_email_verified,email_verified_at,last_login_at,created_at,updated_at"
)

MAX_PAGE_SIZE = 100


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_row(values: dict[str, Any]) -> dict[str, Any]:
    """Convert model values into JSON-safe column values."""
    row = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        row[key] = value
    return row


class UserRepository(BaseRepository[User]):
    """
    Repository for user data access.

    All methods are synchronous and return Pydantic models. Business rules
    (age limits, id format, credential checks) belong to UserService.

    Note: The password is hashed here exactly once, on insert. Password
    changes arrive already hashed.
    """

    def __init__(self, db: Client, hasher: PasswordHasher, table: str = "users"):
        super().__init__(db)
        self._hasher = hasher
        self._table = table

    @contextmanager
    def _unique_email(self) -> Iterator[None]:
        # _storage_errors lets unique violations through untouched
        try:
            with self._storage_errors():
                yield
        except APIError as e:
            logger.info("Unique email constraint rejected a write")
            raise DuplicateEmailError() from e

    def _users(self):
        return self._db.table(self._table)

    # -------------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------------

    def create(self, data: UserCreate) -> User:
        values = data.model_dump(exclude={"password"})
        now = _now()
        row = _to_row({
            **values,
            "password_hash": self._hasher.hash(data.password),
            "is_active": True,
            "is_email_verified": False,
            "created_at": now,
            "updated_at": now,
        })

        with self._unique_email():
            result = self._users().insert(row).execute()

        return self._map_to_user(result.data[0])

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._storage_errors():
            result = (
                self._users()
                .select(USER_COLUMNS)
                .eq("id", user_id)
                .eq("is_active", True)
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def find_by_email(self, email: str) -> Optional[User]:
        with self._storage_errors():
            result = (
                self._users()
                .select(USER_COLUMNS)
                .eq("email", email.strip().lower())
                .eq("is_active", True)
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def find_by_email_for_auth(self, email: str) -> Optional[UserCredentials]:
        with self._storage_errors():
            result = (
                self._users()
                .select("*")
                .eq("email", email.strip().lower())
                .order("is_active", desc=True)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        if not result.data:
            return None
        return UserCredentials.model_validate(result.data[0])

    def find_by_id_including_inactive(self, user_id: str) -> Optional[User]:
        with self._storage_errors():
            result = self._users().select(USER_COLUMNS).eq("id", user_id).execute()
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def list_users(self, query: UserQuery) -> UserPage:
        """
        List users with filtering, search, sorting and pagination.

        The active filter defaults to active users only.
        """
        limit = min(query.limit, MAX_PAGE_SIZE)
        offset = (query.page - 1) * limit
        is_active = True if query.is_active is None else query.is_active

        builder = self._users().select(USER_COLUMNS, count="exact").eq("is_active", is_active)
        if query.gender:
            builder = builder.eq("gender", query.gender.value)
        if query.search:
            # UserQuery already dropped filter syntax and wildcards
            term = query.search
            builder = builder.or_(
                f"first_name.ilike.%{term}%,last_name.ilike.%{term}%,email.ilike.%{term}%"
            )

        with self._storage_errors():
            result = (
                builder
                .order(query.sort_by.value, desc=query.sort_order == SortOrder.DESC)
                .range(offset, offset + limit - 1)
                .execute()
            )

        users = [self._map_to_user(row) for row in result.data]
        return UserPage.build(users, total=result.count or 0, limit=limit)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        row = _to_row({**changes, "updated_at": _now()})
        with self._unique_email():
            result = (
                self._users()
                .update(row)
                .eq("id", user_id)
                .eq("is_active", True)
                .execute()
            )
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    def soft_delete(self, user_id: str) -> bool:
        return self._update_active(user_id, {"is_active": False})

    def change_password(self, user_id: str, password_hash: str) -> bool:
        return self._update_active(user_id, {"password_hash": password_hash})

    def verify_email(self, user_id: str) -> bool:
        now = _now()
        return self._update_active(
            user_id, {"is_email_verified": True, "email_verified_at": now}, now=now
        )

    def update_last_login(self, user_id: str) -> None:
        now = _now()
        self._update_active(user_id, {"last_login_at": now}, now=now)

    def _update_active(
        self,
        user_id: str,
        values: dict[str, Any],
        now: Optional[datetime] = None,
    ) -> bool:
        """Update an active record. Returns whether a row was affected."""
        row = _to_row({**values, "updated_at": now or _now()})
        with self._storage_errors():
            result = (
                self._users()
                .update(row)
                .eq("id", user_id)
                .eq("is_active", True)
                .execute()
            )
        return len(result.data) > 0

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def count_active(self) -> int:
        with self._storage_errors():
            result = self._users().select("id", count="exact").eq("is_active", True).execute()
        return result.count or 0

    def count_verified(self) -> int:
        with self._storage_errors():
            result = (
                self._users()
                .select("id", count="exact")
                .eq("is_active", True)
                .eq("is_email_verified", True)
                .execute()
            )
        return result.count or 0

    def find_recently_created(self, hours: int = 24) -> list[User]:
        cutoff = _now() - timedelta(hours=hours)
        with self._storage_errors():
            result = (
                self._users()
                .select(USER_COLUMNS)
                .eq("is_active", True)
                .gte("created_at", cutoff.isoformat())
                .order("created_at", desc=True)
                .execute()
            )
        return [self._map_to_user(row) for row in result.data]

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def _map_to_user(self, data: dict[str, Any]) -> User:
        """Map a database row to a User. Unknown columns are dropped."""
        return User(
            id=str(data["id"]),
            email=data["email"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            date_of_birth=data.get("date_of_birth"),
            gender=data.get("gender"),
            phone=data.get("phone"),
            is_active=data.get("is_active", True),
            is_email_verified=data.get("is_email_verified", False),
            email_verified_at=data.get("email_verified_at"),
            last_login_at=data.get("last_login_at"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )
