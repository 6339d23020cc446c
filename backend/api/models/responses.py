"""
Response envelope models.

Every response, success or failure, is wrapped in the same envelope:
{success, message, data | errors, timestamp}.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope."""

    success: bool = True
    message: str
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=_utc_now)


class FieldError(BaseModel):
    """One error entry. field is only set for request validation failures."""

    field: Optional[str] = None
    message: str
    code: str


class ApiErrorResponse(BaseModel):
    """Error response envelope."""

    success: bool = False
    message: str
    errors: Optional[list[FieldError]] = None
    timestamp: datetime = Field(default_factory=_utc_now)


def ok(data: Any = None, message: str = "OK") -> ApiResponse:
    return ApiResponse(message=message, data=data)
