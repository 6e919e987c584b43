"""
Access module data models.

These models describe a single row-level access decision.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shared.models import Principal


class Table(str, Enum):
    """Protected tables."""

    PROFILES = "users"
    LIKES = "courses_likes"
    COURSES = "courses"
    SUBSCRIPTIONS = "subscriptions"
    PROCESSED_EVENTS = "processed_events"


class Operation(str, Enum):
    """Row operations subject to access control."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class Decision(str, Enum):
    """Outcome of a policy evaluation."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class AccessContext:
    """
    Everything a policy may know about the requester.

    Built fresh for every request by the data layer. ``profile_id`` is the
    principal's own row in ``users`` (None before registration);
    ``subscription_active`` is only resolved for content tables.
    """

    principal: Optional[Principal]
    profile_id: Optional[str] = None
    subscription_active: bool = False
