"""
User-related endpoints.

Provides endpoints for self-registration and profile management. Every
handler acts as the authenticated principal; there is no way to name
another principal's profile.
"""

from fastapi import APIRouter, Depends, HTTPException

from modules.access import AccessDeniedError
from modules.profiles import (
    Profile,
    ProfileListResponse,
    ProfileNotFoundError,
    ProfileService,
    UpdateProfileRequest,
)
from shared.models import Principal
from ..dependencies import get_profile_service
from ..middleware.auth import get_current_principal

router = APIRouter()


@router.post("/register", response_model=Profile)
async def register(
    principal: Principal = Depends(get_current_principal),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """
    Register the current principal.

    Idempotent: returns the existing profile on repeated calls.
    """
    try:
        return await service.register_principal(principal)
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Not allowed to register")


@router.get("/me", response_model=Profile)
async def get_current_user_profile(
    principal: Principal = Depends(get_current_principal),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """
    Get the current principal's profile.

    Requires authentication and a prior registration.
    """
    try:
        return await service.get_own_profile(principal)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")


@router.patch("/me", response_model=Profile)
async def update_current_user_profile(
    request: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """
    Update the current principal's display name or avatar.
    """
    try:
        return await service.update_own_profile(principal, request)
    except (ProfileNotFoundError, AccessDeniedError):
        raise HTTPException(status_code=404, detail="Profile not found")


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    principal: Principal = Depends(get_current_principal),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """
    List profiles visible to the current principal.

    Regular principals see only their own profile.
    """
    profiles = await service.list_profiles(principal)
    return ProfileListResponse(profiles=profiles, total=len(profiles))
