"""
Profile service.

Every call takes the acting principal and goes through the access-controlled
tables, so a principal only ever reads or writes its own profile unless it
is elevated.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from modules.access import AccessControlledTables, Table
from shared.exceptions import ConflictError
from shared.models import Principal

from .exceptions import ProfileNotFoundError
from .models import Profile, UpdateProfileRequest

logger = logging.getLogger(__name__)


class ProfileService:
    """Registration and self-service for profiles."""

    def __init__(self, tables: AccessControlledTables) -> None:
        self._tables = tables

    async def register_principal(self, principal: Principal) -> Profile:
        """
        Create the principal's profile, or return it if it already exists.

        Safe to call repeatedly or concurrently: the unique constraint on
        ``auth_user_id`` decides which call creates the row, and the others
        read it back.
        """
        existing = self._find(principal)
        if existing is not None:
            return existing

        row = {"auth_user_id": principal.id, "email": principal.email}
        try:
            created = self._tables.insert(principal, Table.PROFILES, row)
        except ConflictError:
            logger.debug("Profile for %s created concurrently", principal.id)
            existing = self._find(principal)
            if existing is None:
                raise
            return existing

        logger.info("Registered profile %s", created["id"])
        return Profile(**created)

    async def get_own_profile(self, principal: Principal) -> Profile:
        profile = self._find(principal)
        if profile is None:
            raise ProfileNotFoundError(principal.id)
        return profile

    async def update_own_profile(
        self,
        principal: Principal,
        request: UpdateProfileRequest,
    ) -> Profile:
        """
        Update display fields on the principal's own profile.

        Raises:
            AccessDeniedError: If the principal has no profile
        """
        values = request.model_dump(exclude_unset=True)
        if not values:
            return await self.get_own_profile(principal)

        values["updated_at"] = datetime.now(timezone.utc).isoformat()
        rows = self._tables.update(
            principal,
            Table.PROFILES,
            {"auth_user_id": principal.id},
            values,
        )
        return Profile(**rows[0])

    async def list_profiles(self, principal: Principal) -> list[Profile]:
        """All profiles the principal may see: its own, or all if elevated."""
        rows = self._tables.select(principal, Table.PROFILES)
        return [Profile(**row) for row in rows]

    def _find(self, principal: Principal) -> Optional[Profile]:
        rows = self._tables.select(principal, Table.PROFILES, {"auth_user_id": principal.id})
        return Profile(**rows[0]) if rows else None
