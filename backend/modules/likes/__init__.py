"""
Likes module.

Public API:
- LikeService: like_course / unlike_course / list_likes
- Like: A stored like
"""

from .models import Like, LikeCourseRequest, LikeListResponse
from .service import LikeService

__all__ = [
    "LikeService",
    "Like",
    "LikeCourseRequest",
    "LikeListResponse",
]
