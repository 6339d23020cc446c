"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
Everything runs against the in-memory user store with a controllable clock,
so no database or network is needed.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # PyJWT
import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer, reset_container, set_container
from modules.auth.hashing import PasswordHasher
from modules.auth.service import AuthService
from modules.auth.tokens import TokenService
from modules.users.memory import InMemoryUserRepository
from modules.users.models import UserCreate
from modules.users.service import UserService
from shared.config import Settings


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only-0123456789"
TEST_ISSUER = "accounts-api"
TEST_AUDIENCE = "accounts-client"

VALID_PASSWORD = "Password123!"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def create_test_token(
    user_id: str = "0b6f4f1e-7a8c-4d2b-9e3f-5a1c2d3e4f50",
    email: str = "test@example.com",
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
    **overrides,
) -> str:
    """
    Create a signed token directly with PyJWT, bypassing TokenService.

    Args:
        user_id: Subject claim
        email: Email claim
        expired: If True, the token expired an hour ago
        secret: Signing secret
        **overrides: Claims to add or replace (None removes the claim)
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": TEST_ISSUER,
        "aud": TEST_AUDIENCE,
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret, algorithm="HS256")


def make_user_create(email: str = "jane@example.com", **overrides) -> UserCreate:
    fields = {
        "email": email,
        "password": VALID_PASSWORD,
        "first_name": "Jane",
        "last_name": "Doe",
    }
    fields.update(overrides)
    return UserCreate(**fields)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="memory",
        jwt_secret=TEST_JWT_SECRET,
        jwt_issuer=TEST_ISSUER,
        jwt_audience=TEST_AUDIENCE,
        bcrypt_rounds=4,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheapest bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_repository(hasher, clock) -> InMemoryUserRepository:
    return InMemoryUserRepository(hasher, clock=clock)


@pytest.fixture
def user_service(user_repository, hasher) -> UserService:
    return UserService(user_repository, hasher)


@pytest.fixture
def token_service(clock) -> TokenService:
    return TokenService(
        secret=TEST_JWT_SECRET,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        clock=clock,
    )


@pytest.fixture
def auth_service(user_service, token_service) -> AuthService:
    return AuthService(user_service, token_service)


@pytest.fixture
def container(test_settings, hasher, user_repository, token_service):
    """
    Install a container wired to the in-memory store.

    The container shares the fixtures' clock, so tests can expire tokens
    issued through the API.
    """
    c = ServiceContainer(test_settings)
    c._hasher = hasher
    c._user_repository = user_repository
    c._token_service = token_service
    set_container(c)
    yield c
    reset_container()


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app())


@pytest.fixture(autouse=True)
def reset_container_singleton():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization headers with a valid token for an arbitrary user."""
    return {"Authorization": f"Bearer {create_test_token()}"}


@pytest.fixture
def token_factory():
    """The create_test_token helper, for tests that need forged tokens."""
    return create_test_token


@pytest.fixture
def user_data():
    """Factory for valid UserCreate payloads."""
    return make_user_create
