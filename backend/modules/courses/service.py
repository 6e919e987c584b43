"""
Course catalogue service.

Premium gating happens in the access layer: a premium course the principal
cannot read is indistinguishable from a missing one.
"""

import logging

from modules.access import AccessControlledTables, Table
from shared.models import Principal

from .exceptions import CourseNotFoundError
from .models import Course, CreateCourseRequest

logger = logging.getLogger(__name__)


class CourseService:
    """Read courses as a principal; create them as an elevated one."""

    def __init__(self, tables: AccessControlledTables) -> None:
        self._tables = tables

    async def list_courses(
        self,
        principal: Principal,
        include_inactive: bool = False,
    ) -> list[Course]:
        filters = None if include_inactive else {"active": True}
        rows = self._tables.select(principal, Table.COURSES, filters)
        return [Course(**row) for row in rows]

    async def get_course(self, principal: Principal, course_id: str) -> Course:
        """
        Raises:
            CourseNotFoundError: If missing or not readable by the principal
        """
        rows = self._tables.select(principal, Table.COURSES, {"id": course_id})
        if not rows:
            raise CourseNotFoundError(course_id)
        return Course(**rows[0])

    async def create_course(
        self,
        principal: Principal,
        request: CreateCourseRequest,
    ) -> Course:
        """
        Raises:
            AccessDeniedError: If the principal is not elevated
        """
        row = self._tables.insert(principal, Table.COURSES, request.model_dump())
        logger.info("Created course %s", row["id"])
        return Course(**row)
