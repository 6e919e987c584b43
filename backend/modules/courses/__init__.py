"""
Courses module.

Public API:
- CourseService: list_courses / get_course / create_course
- Course: A content item
"""

from .exceptions import CourseNotFoundError
from .models import Course, CourseListResponse, CreateCourseRequest
from .service import CourseService

__all__ = [
    "CourseService",
    "Course",
    "CourseListResponse",
    "CreateCourseRequest",
    "CourseNotFoundError",
]
