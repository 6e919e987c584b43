"""
Courses module data models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Course(BaseModel):
    """A content item. Premium courses need an active subscription to read."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    description: Optional[str] = None
    active: bool = True
    premium: bool = False
    created_at: Optional[datetime] = None


class CreateCourseRequest(BaseModel):
    """Request to create a course (elevated principals only)."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    active: bool = True
    premium: bool = False


class CourseListResponse(BaseModel):
    """Courses visible to the requesting principal."""

    courses: list[Course]
    total: int
