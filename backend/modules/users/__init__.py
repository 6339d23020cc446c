"""
Users module.

Owns the user record lifecycle: creation, lookup, profile updates, soft
deletion, password changes, email verification and listing.

Public API:
- IUserService / IUserRepository: Interfaces
- User, UserResponse, UserQuery, ...: Models
- User exceptions: UserNotFoundError, DuplicateEmailError, etc.

Concrete implementations (UserService, UserRepository,
InMemoryUserRepository) are imported from their submodules.
"""

from .interfaces import IUserRepository, IUserService
from .models import (
    Gender,
    SortField,
    SortOrder,
    User,
    UserCreate,
    UserUpdate,
    UserQuery,
    UserResponse,
    UserListResponse,
    UserStats,
)
from .exceptions import (
    UserNotFoundError,
    DuplicateEmailError,
    UnderageError,
    InvalidUserIdError,
)

__all__ = [
    # Interfaces
    "IUserRepository",
    "IUserService",
    # Models
    "Gender",
    "SortField",
    "SortOrder",
    "User",
    "UserCreate",
    "UserUpdate",
    "UserQuery",
    "UserResponse",
    "UserListResponse",
    "UserStats",
    # Exceptions
    "UserNotFoundError",
    "DuplicateEmailError",
    "UnderageError",
    "InvalidUserIdError",
]
