"""
Likes module data models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Like(BaseModel):
    """A profile's like of a course (the ``courses_likes`` table)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str = Field(..., description="Profile ID of the liker")
    course_id: str
    created_at: Optional[datetime] = None


class LikeCourseRequest(BaseModel):
    """Request to like a course."""

    course_id: str = Field(..., min_length=1)


class LikeListResponse(BaseModel):
    """Likes visible to the requesting principal."""

    likes: list[Like]
    total: int
