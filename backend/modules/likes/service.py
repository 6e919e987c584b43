"""
Likes service.

Likes are owned by the liker's profile, not by the principal directly, so
each call resolves the principal's profile before writing.
"""

import logging
from typing import Optional

from modules.access import AccessControlledTables, Table
from modules.courses.exceptions import CourseNotFoundError
from modules.profiles.exceptions import ProfileNotFoundError
from shared.exceptions import ConflictError
from shared.models import Principal

from .models import Like

logger = logging.getLogger(__name__)


class LikeService:
    """Like, unlike and list likes for the acting principal."""

    def __init__(self, tables: AccessControlledTables) -> None:
        self._tables = tables

    async def like_course(self, principal: Principal, course_id: str) -> Like:
        """
        Like a course. Liking an already-liked course returns the existing like.

        Raises:
            ProfileNotFoundError: If the principal has not registered
            CourseNotFoundError: If the course does not exist or is not
                visible to the principal
        """
        profile_id = self._profile_id(principal)
        if not self._tables.select(principal, Table.COURSES, {"id": course_id}):
            raise CourseNotFoundError(course_id)

        row = {"user_id": profile_id, "course_id": course_id}
        try:
            created = self._tables.insert(principal, Table.LIKES, row)
        except ConflictError:
            existing = self._tables.select(principal, Table.LIKES, row)
            if not existing:
                raise
            return Like(**existing[0])

        logger.debug("Profile %s liked course %s", profile_id, course_id)
        return Like(**created)

    async def unlike_course(self, principal: Principal, course_id: str) -> None:
        """
        Remove the principal's like of a course.

        Raises:
            AccessDeniedError: If the principal has no like for the course
        """
        profile_id = self._profile_id(principal)
        self._tables.delete(
            principal,
            Table.LIKES,
            {"user_id": profile_id, "course_id": course_id},
        )

    async def list_likes(
        self,
        principal: Principal,
        user_id: Optional[str] = None,
        course_id: Optional[str] = None,
    ) -> list[Like]:
        """
        List likes visible to the principal, optionally filtered.

        Filtering by another profile's ``user_id`` yields nothing for a
        regular principal.
        """
        filters = {}
        if user_id is not None:
            filters["user_id"] = user_id
        if course_id is not None:
            filters["course_id"] = course_id
        rows = self._tables.select(principal, Table.LIKES, filters)
        return [Like(**row) for row in rows]

    def _profile_id(self, principal: Principal) -> str:
        rows = self._tables.select(principal, Table.PROFILES, {"auth_user_id": principal.id})
        if not rows:
            raise ProfileNotFoundError(principal.id)
        return rows[0]["id"]
