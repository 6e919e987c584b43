"""
Access module exceptions.
"""

from shared.exceptions import AuthorizationError


class AccessDeniedError(AuthorizationError):
    """
    Raised when a mutation targets no row the principal may touch.

    The same error is raised whether the row is missing or exists but is
    denied, so callers cannot discover rows they do not own.
    """

    def __init__(self, table: str):
        super().__init__(
            f"No accessible {table} row for this request",
            details={"table": table},
        )
