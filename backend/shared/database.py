"""
Supabase client factory.

The user repository talks to Postgres through PostgREST with the service
role key. Account rows are owned by the backend, so row level security is
bypassed and ownership is checked in the API layer instead.
"""

from typing import Optional

from supabase import Client, ClientOptions, create_client

from .config import Settings, get_settings

_client: Optional[Client] = None


def build_client_options(settings: Settings) -> ClientOptions:
    return ClientOptions(
        schema=settings.supabase_schema,
        postgrest_client_timeout=settings.storage_timeout_seconds,
    )


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Return the shared service-role client, creating it on first use.

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is unset
    """
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
        )

    _client = create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=build_client_options(settings),
    )
    return _client


def reset_client_cache() -> None:
    """Drop the cached client. Tests and config reloads use this."""
    global _client
    _client = None
