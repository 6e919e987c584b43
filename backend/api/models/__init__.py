"""API models package."""

from .errors import ErrorResponse
from .user import AUTHENTICATED_ROLE, SERVICE_ROLE, TokenPayload

__all__ = [
    "ErrorResponse",
    "TokenPayload",
    "AUTHENTICATED_ROLE",
    "SERVICE_ROLE",
]
