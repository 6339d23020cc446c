"""
Centralized configuration for the Accounts backend.

All settings are loaded from environment variables with sensible defaults.
Concern-specific settings are namespaced (e.g., JWT_*, SUPABASE_*, BCRYPT_*).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Accounts API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage
    storage_backend: Literal["supabase", "memory"] = "supabase"
    users_table: str = "users"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_schema: str = "public"
    supabase_db_url: str = ""  # direct Postgres URI, used by run_migrations.py
    storage_timeout_seconds: int = Field(default=10, ge=1)

    # Session tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "accounts-api"
    jwt_audience: str = "accounts-client"
    token_ttl_hours: int = Field(default=24, ge=1)

    # Credential hashing
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    @field_validator("jwt_secret")
    @classmethod
    def _check_secret_length(cls, value: str) -> str:
        if value and len(value) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters"
            )
        return value


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
