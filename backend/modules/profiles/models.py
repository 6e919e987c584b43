"""
Profiles module data models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """
    Application-level record for a principal (the ``users`` table).

    Distinct from the principal itself: ``id`` is the profile's own key,
    ``auth_user_id`` links it to the identity provider.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    auth_user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UpdateProfileRequest(BaseModel):
    """Fields a principal may change on its own profile."""

    model_config = ConfigDict(extra="forbid")

    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=2048)


class ProfileListResponse(BaseModel):
    """Profiles visible to the requesting principal."""

    profiles: list[Profile]
    total: int
