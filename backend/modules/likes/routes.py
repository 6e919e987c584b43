"""
Likes API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_like_service
from api.middleware.auth import get_current_principal
from modules.access import AccessDeniedError
from modules.courses.exceptions import CourseNotFoundError
from modules.profiles.exceptions import ProfileNotFoundError
from shared.models import Principal

from .models import Like, LikeCourseRequest, LikeListResponse
from .service import LikeService

router = APIRouter()


@router.get("", response_model=LikeListResponse)
async def list_likes(
    user_id: Optional[str] = Query(default=None, description="Filter by profile ID"),
    course_id: Optional[str] = Query(default=None, description="Filter by course ID"),
    principal: Principal = Depends(get_current_principal),
    service: LikeService = Depends(get_like_service),
) -> LikeListResponse:
    """
    List likes visible to the current principal.

    Regular principals only ever see their own likes.
    """
    likes = await service.list_likes(principal, user_id=user_id, course_id=course_id)
    return LikeListResponse(likes=likes, total=len(likes))


@router.post("", response_model=Like, status_code=201)
async def like_course(
    request: LikeCourseRequest,
    principal: Principal = Depends(get_current_principal),
    service: LikeService = Depends(get_like_service),
) -> Like:
    """
    Like a course.

    Requires a registered profile.
    """
    try:
        return await service.like_course(principal, request.course_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=409, detail="Register a profile first")
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Not allowed")


@router.delete("/{course_id}", status_code=204)
async def unlike_course(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    service: LikeService = Depends(get_like_service),
) -> None:
    """
    Remove the current principal's like of a course.
    """
    try:
        await service.unlike_course(principal, course_id)
    except (ProfileNotFoundError, AccessDeniedError):
        raise HTTPException(status_code=404, detail="Like not found")
