"""
Courses module exceptions.
"""

from shared.exceptions import NotFoundError


class CourseNotFoundError(NotFoundError):
    """Raised when a course does not exist or is not visible to the principal."""

    def __init__(self, course_id: str):
        super().__init__(
            f"Course not found: {course_id}",
            code="COURSE_NOT_FOUND",
            details={"course_id": course_id},
        )
