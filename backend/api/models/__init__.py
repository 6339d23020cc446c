"""API models package."""

from .responses import ApiResponse, ApiErrorResponse, FieldError, ok

__all__ = [
    "ApiResponse",
    "ApiErrorResponse",
    "FieldError",
    "ok",
]
