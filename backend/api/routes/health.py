"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from shared.config import get_settings

from ..models import ApiResponse, ok

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check payload."""

    status: str
    storage: str
    tokens: str


@router.get("/health", response_model=ApiResponse[HealthResponse])
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    health = HealthResponse(status="healthy", version=get_settings().app_version)
    return ok(health, "Service is healthy")


@router.get("/ready", response_model=ApiResponse[ReadinessResponse])
async def readiness_check():
    """
    Readiness check endpoint.

    Reports the configured storage backend and whether a token signing
    secret is present.
    """
    settings = get_settings()
    readiness = ReadinessResponse(
        status="ready" if settings.jwt_secret else "degraded",
        storage=settings.storage_backend,
        tokens="configured" if settings.jwt_secret else "missing_secret",
    )
    return ok(readiness, f"Service is {readiness.status}")
