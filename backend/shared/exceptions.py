"""
Error taxonomy for the Courses backend.

Every error carries a stable machine-readable ``code`` and the HTTP status it
renders as when it escapes a route handler. Modules subclass these bases and
may narrow the code (``COURSE_NOT_FOUND``), but the status follows the base.

Access decisions are never shown to the caller: an AuthorizationError renders
exactly like a missing resource.
"""

from typing import Optional, Any

NOT_FOUND_MESSAGE = "Resource not found"


class CoursesError(Exception):
    """
    Base exception for all Courses backend errors.

    Unclassified errors are internal: they render as 500 and get logged.
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or type(self).code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(CoursesError):
    """Resource not found."""

    code = "NOT_FOUND"
    status_code = 404


class ValidationError(CoursesError):
    """Input validation failed."""

    code = "VALIDATION_FAILED"
    status_code = 400


class AuthenticationError(CoursesError):
    """Authentication failed (invalid or missing credentials)."""

    code = "UNAUTHENTICATED"
    status_code = 401


class AuthorizationError(CoursesError):
    """
    The principal may not touch the resource.

    ``message`` and ``details`` stay server-side for logs; the response body
    is the generic not-found one.
    """

    code = NotFoundError.code
    status_code = NotFoundError.status_code

    def to_dict(self) -> dict[str, Any]:
        return {"error": NotFoundError.code, "message": NOT_FOUND_MESSAGE, "details": {}}


class ConflictError(CoursesError):
    """A write violated a uniqueness constraint."""

    code = "UNIQUE_VIOLATION"
    status_code = 409

    def __init__(self, table: str, columns: tuple[str, ...] = ()):
        super().__init__(
            f"Duplicate value for {table}",
            details={"table": table, "columns": list(columns)},
        )
        self.table = table
        self.columns = columns


class ExternalServiceError(CoursesError):
    """Error communicating with an external service."""

    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
