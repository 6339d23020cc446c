"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents the identity carried by a verified session token.

    Populated from token claims by the access-control dependencies and
    made available to route handlers. No database lookup is involved, so
    this says nothing about whether the account is still active.
    """

    id: str = Field(..., description="User ID (UUID)")
    email: str = Field(..., description="User's email address")
    issued_at: Optional[datetime] = Field(None, description="Token issue time")
    expires_at: Optional[datetime] = Field(None, description="Token expiry time")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra claims
    }
