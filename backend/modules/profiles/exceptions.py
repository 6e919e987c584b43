"""
Profiles module exceptions.
"""

from shared.exceptions import NotFoundError


class ProfileNotFoundError(NotFoundError):
    """Raised when the principal has not registered a profile yet."""

    def __init__(self, principal_id: str):
        super().__init__(
            "Profile not found; register first",
            code="PROFILE_NOT_FOUND",
            details={"principal_id": principal_id},
        )
