"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The storage backend is chosen here from settings; nothing below the
container knows whether it is talking to Supabase or to memory.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.hashing import PasswordHasher
    from modules.auth.interfaces import IAuthService
    from modules.auth.tokens import TokenService
    from modules.users.interfaces import IUserRepository, IUserService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._hasher: "PasswordHasher | None" = None
        self._user_repository: "IUserRepository | None" = None
        self._user_service: "IUserService | None" = None
        self._token_service: "TokenService | None" = None
        self._auth_service: "IAuthService | None" = None

    @property
    def hasher(self) -> "PasswordHasher":
        """Get the password hasher."""
        if self._hasher is None:
            from modules.auth.hashing import PasswordHasher
            self._hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        return self._hasher

    @property
    def user_repository(self) -> "IUserRepository":
        """Get the user repository for the configured storage backend."""
        if self._user_repository is None:
            if self.settings.storage_backend == "memory":
                from modules.users.memory import InMemoryUserRepository
                self._user_repository = InMemoryUserRepository(self.hasher)
            else:
                from modules.users.repository import UserRepository
                from shared.database import get_supabase_client
                self._user_repository = UserRepository(
                    get_supabase_client(self.settings),
                    self.hasher,
                    table=self.settings.users_table,
                )
        return self._user_repository

    @property
    def users(self) -> "IUserService":
        """Get the user service instance."""
        if self._user_service is None:
            from modules.users.service import UserService
            self._user_service = UserService(self.user_repository, self.hasher)
        return self._user_service

    @property
    def tokens(self) -> "TokenService":
        """Get the token service. The signing secret is read here, once."""
        if self._token_service is None:
            from modules.auth.tokens import TokenService
            self._token_service = TokenService(
                secret=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
                issuer=self.settings.jwt_issuer,
                audience=self.settings.jwt_audience,
                ttl=timedelta(hours=self.settings.token_ttl_hours),
            )
        return self._token_service

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(self.users, self.tokens)
        return self._auth_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._hasher = None
        self._user_repository = None
        self._user_service = None
        self._token_service = None
        self._auth_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (used by tests)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_user_service() -> "IUserService":
    """FastAPI dependency for user service."""
    return get_container().users


def get_token_service() -> "TokenService":
    """FastAPI dependency for token service."""
    return get_container().tokens
