"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the translation of PostgREST failures into
the shared exception hierarchy.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import StorageError, StorageUnavailableError


T = TypeVar("T")

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - _storage_errors() to map driver failures onto AccountsError kinds

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class UserRepository(BaseRepository[User]):
            def find_by_id(self, user_id: str) -> Optional[User]:
                with self._storage_errors():
                    result = self._db.table("users").select("*").eq("id", user_id).execute()
                if not result.data:
                    return None
                return self._map_to_user(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @contextmanager
    def _storage_errors(self) -> Iterator[None]:
        """
        Translate transport and PostgREST errors raised inside the block.

        Unique violations are re-raised untouched so that subclasses can map
        them onto their own conflict errors.
        """
        try:
            yield
        except httpx.TransportError as e:
            logger.error("Storage unreachable: %s", e.__class__.__name__)
            raise StorageUnavailableError() from e
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise
            logger.error("Storage rejected operation (code=%s)", e.code)
            raise StorageError() from e
