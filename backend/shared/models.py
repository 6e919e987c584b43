"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """Roles a principal can carry."""

    REGULAR = "regular"
    ADMIN = "admin"
    SERVICE = "service"


class Principal(BaseModel):
    """
    Represents an authenticated identity in the system.

    This model is populated from JWT claims and passed explicitly to every
    data-access call. It is distinct from the application-level profile row.
    """

    id: str = Field(..., description="Principal ID (UUID from Supabase Auth)")
    role: Role = Field(default=Role.REGULAR, description="Principal role")
    email: Optional[str] = Field(None, description="Email claim, if present")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }

    @property
    def is_elevated(self) -> bool:
        """Admin and service identities bypass row ownership checks."""
        return self.role in (Role.ADMIN, Role.SERVICE)


# Identity used by backend-driven writes (e.g. the subscription reconciler).
SERVICE_PRINCIPAL = Principal(id="service", role=Role.SERVICE)
