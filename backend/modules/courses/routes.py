"""
Course API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_course_service
from api.middleware.auth import get_current_principal
from modules.access import AccessDeniedError
from shared.models import Principal

from .exceptions import CourseNotFoundError
from .models import Course, CourseListResponse, CreateCourseRequest
from .service import CourseService

router = APIRouter()


@router.get("", response_model=CourseListResponse)
async def list_courses(
    include_inactive: bool = Query(default=False, description="Include inactive courses"),
    principal: Principal = Depends(get_current_principal),
    service: CourseService = Depends(get_course_service),
) -> CourseListResponse:
    """
    List courses visible to the current principal.

    Premium courses appear only with an active subscription.
    """
    courses = await service.list_courses(principal, include_inactive)
    return CourseListResponse(courses=courses, total=len(courses))


@router.post("", response_model=Course, status_code=201)
async def create_course(
    request: CreateCourseRequest,
    principal: Principal = Depends(get_current_principal),
    service: CourseService = Depends(get_course_service),
) -> Course:
    """Create a course. Admin and service principals only."""
    try:
        return await service.create_course(principal, request)
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Not allowed to create courses")


@router.get("/{course_id}", response_model=Course)
async def get_course(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    service: CourseService = Depends(get_course_service),
) -> Course:
    """
    Get a course.
    """
    try:
        return await service.get_course(principal, course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
