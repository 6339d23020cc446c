"""
User module data models.

Field rules shared by the request schemas live here as annotated types so
the auth module can reuse them for login and registration.
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)


MAX_AGE_YEARS = 120
MAX_EMAIL_LENGTH = 255

_NAME_PATTERN = r"^[a-zA-ZÀ-ÿ\s]+$"
_PHONE_PATTERN = r"^\+?[\d\s\-()]+$"

# bcrypt input limit
PASSWORD_MAX_BYTES = 72

# Removed from search terms: PostgREST filter syntax and LIKE wildcards
_SEARCH_DROPPED = str.maketrans("", "", ",()\"\\%_*")


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class SortField(str, Enum):
    CREATED_AT = "created_at"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _check_email_length(value: str) -> str:
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
    return value


def _check_password(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValueError(
            "Password must contain at least one lowercase letter, "
            "one uppercase letter, and one number"
        )
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def years_between(born: date, today: date) -> int:
    """Whole years elapsed from born to today."""
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def _check_birth_date(value: Optional[date]) -> Optional[date]:
    if value is None:
        return value
    today = date.today()
    if value > today:
        raise ValueError("Date of birth cannot be in the future")
    if years_between(value, today) > MAX_AGE_YEARS:
        raise ValueError(f"Date of birth cannot be more than {MAX_AGE_YEARS} years ago")
    return value


NormalizedEmail = Annotated[
    EmailStr,
    BeforeValidator(_normalize_email),
    AfterValidator(_check_email_length),
]

PasswordStr = Annotated[
    str,
    StringConstraints(min_length=8, max_length=PASSWORD_MAX_BYTES),
    AfterValidator(_check_password),
]

NameStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=2, max_length=100, pattern=_NAME_PATTERN),
]

PhoneStr = Annotated[
    Optional[Annotated[str, StringConstraints(min_length=10, max_length=20, pattern=_PHONE_PATTERN)]],
    BeforeValidator(_blank_to_none),
]

BirthDate = Annotated[Optional[date], AfterValidator(_check_birth_date)]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class User(BaseModel):
    """A stored user record, without credential material."""

    id: str
    email: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    is_active: bool = True
    is_email_verified: bool = False
    email_verified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserCredentials(User):
    """
    A user record together with its password hash.

    Only returned by the authentication lookup. The hash is excluded from
    serialization and repr.
    """

    password_hash: str = Field(..., exclude=True, repr=False)

    def to_user(self) -> User:
        return User(**self.model_dump())


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request to create a user account."""

    model_config = {"extra": "forbid"}

    email: NormalizedEmail
    password: PasswordStr
    first_name: NameStr
    last_name: NameStr
    date_of_birth: BirthDate = None
    gender: Optional[Gender] = None
    phone: PhoneStr = None


class UserUpdate(BaseModel):
    """Partial profile update. Only fields that were sent are applied."""

    model_config = {"extra": "forbid"}

    email: Optional[NormalizedEmail] = None
    first_name: Optional[NameStr] = None
    last_name: Optional[NameStr] = None
    date_of_birth: BirthDate = None
    gender: Optional[Gender] = None
    phone: PhoneStr = None

    def changes(self) -> dict:
        """Fields the caller sent. Required columns cannot be cleared."""
        changes = self.model_dump(exclude_unset=True)
        for required in ("email", "first_name", "last_name"):
            if changes.get(required, "") is None:
                del changes[required]
        return changes


class UserQuery(BaseModel):
    """Listing filter. Out-of-range page or limit is a validation error."""

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    search: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None
    gender: Optional[Gender] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("search")
    @classmethod
    def _clean_search(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.translate(_SEARCH_DROPPED).strip() or None


class UserPage(BaseModel):
    items: list[User]
    total: int
    total_pages: int

    @classmethod
    def build(cls, items: list[User], total: int, limit: int) -> "UserPage":
        return cls(items=items, total=total, total_pages=math.ceil(total / limit) if limit else 0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Outward-facing user representation."""

    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    is_active: bool
    is_email_verified: bool
    email_verified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        # Built from an explicit field list so no credential field can leak.
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=f"{user.first_name} {user.last_name}".strip(),
            date_of_birth=user.date_of_birth,
            gender=user.gender,
            phone=user.phone,
            is_active=user.is_active,
            is_email_verified=user.is_email_verified,
            email_verified_at=user.email_verified_at,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    total_pages: int
    page: int
    limit: int


class UserStats(BaseModel):
    total_active: int
    recent_users: int = Field(..., description="Accounts created in the last 24 hours")
    verified_users: int
