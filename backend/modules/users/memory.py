"""
In-process user store.

Same contract as UserRepository, backed by a dict. Used by the test suite
and by STORAGE_BACKEND=memory for local development. Every operation runs
under one lock, which makes the active-email check and the insert a single
atomic step just like the partial unique index does in Postgres.
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from modules.auth.hashing import PasswordHasher

from .exceptions import DuplicateEmailError
from .models import SortOrder, User, UserCreate, UserCredentials, UserPage, UserQuery
from .repository import MAX_PAGE_SIZE


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    """Thread-safe dict-backed user store."""

    def __init__(
        self,
        hasher: PasswordHasher,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._hasher = hasher
        self._clock = clock
        self._records: dict[str, UserCredentials] = {}
        self._lock = threading.Lock()

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            r.is_active and r.email == email and r.id != exclude_id
            for r in self._records.values()
        )

    def _active(self, user_id: str) -> Optional[UserCredentials]:
        record = self._records.get(user_id)
        if record is None or not record.is_active:
            return None
        return record

    def _replace(self, record: UserCredentials, values: dict[str, Any]) -> UserCredentials:
        updated = record.model_copy(update=values)
        self._records[record.id] = updated
        return updated

    def create(self, data: UserCreate) -> User:
        # Hash outside the lock; it is the slow part.
        password_hash = self._hasher.hash(data.password)
        now = self._clock()
        with self._lock:
            if self._email_taken(data.email):
                raise DuplicateEmailError()
            record = UserCredentials(
                id=str(uuid.uuid4()),
                **data.model_dump(exclude={"password"}),
                password_hash=password_hash,
                is_active=True,
                is_email_verified=False,
                created_at=now,
                updated_at=now,
            )
            self._records[record.id] = record
        return record.to_user()

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            record = self._active(user_id)
        return record.to_user() if record else None

    def find_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        with self._lock:
            for record in self._records.values():
                if record.is_active and record.email == email:
                    return record.to_user()
        return None

    def find_by_email_for_auth(self, email: str) -> Optional[UserCredentials]:
        email = email.strip().lower()
        with self._lock:
            matches = [r for r in self._records.values() if r.email == email]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.is_active, r.created_at))

    def find_by_id_including_inactive(self, user_id: str) -> Optional[User]:
        with self._lock:
            record = self._records.get(user_id)
        return record.to_user() if record else None

    def list_users(self, query: UserQuery) -> UserPage:
        limit = min(query.limit, MAX_PAGE_SIZE)
        offset = (query.page - 1) * limit
        is_active = True if query.is_active is None else query.is_active
        term = query.search.lower() if query.search else None

        with self._lock:
            records = list(self._records.values())

        matches = []
        for record in records:
            if record.is_active != is_active:
                continue
            if query.gender and record.gender != query.gender:
                continue
            if term and not any(
                term in value.lower()
                for value in (record.first_name, record.last_name, record.email)
            ):
                continue
            matches.append(record)

        field = query.sort_by.value

        def sort_key(record: UserCredentials):
            value = getattr(record, field)
            return value.lower() if isinstance(value, str) else value

        matches.sort(key=sort_key, reverse=query.sort_order == SortOrder.DESC)
        items = [r.to_user() for r in matches[offset:offset + limit]]
        return UserPage.build(items, total=len(matches), limit=limit)

    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        with self._lock:
            record = self._active(user_id)
            if record is None:
                return None
            email = changes.get("email")
            if email and email != record.email and self._email_taken(email, exclude_id=user_id):
                raise DuplicateEmailError()
            updated = self._replace(record, {**changes, "updated_at": self._clock()})
        return updated.to_user()

    def _update_active(self, user_id: str, values: dict[str, Any]) -> bool:
        with self._lock:
            record = self._active(user_id)
            if record is None:
                return False
            self._replace(record, {**values, "updated_at": self._clock()})
        return True

    def soft_delete(self, user_id: str) -> bool:
        return self._update_active(user_id, {"is_active": False})

    def change_password(self, user_id: str, password_hash: str) -> bool:
        return self._update_active(user_id, {"password_hash": password_hash})

    def verify_email(self, user_id: str) -> bool:
        return self._update_active(
            user_id, {"is_email_verified": True, "email_verified_at": self._clock()}
        )

    def update_last_login(self, user_id: str) -> None:
        self._update_active(user_id, {"last_login_at": self._clock()})

    def count_active(self) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.is_active)

    def count_verified(self) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.is_active and r.is_email_verified)

    def find_recently_created(self, hours: int = 24) -> list[User]:
        cutoff = self._clock() - timedelta(hours=hours)
        with self._lock:
            recent = [
                r for r in self._records.values()
                if r.is_active and r.created_at >= cutoff
            ]
        recent.sort(key=lambda r: r.created_at, reverse=True)
        return [r.to_user() for r in recent]
