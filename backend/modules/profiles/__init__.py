"""
Profiles module.

One application profile per principal, created on self-registration.
"""

from .exceptions import ProfileNotFoundError
from .models import Profile, ProfileListResponse, UpdateProfileRequest
from .service import ProfileService

__all__ = [
    "ProfileService",
    "Profile",
    "ProfileListResponse",
    "UpdateProfileRequest",
    "ProfileNotFoundError",
]
