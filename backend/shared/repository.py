"""
Repository base classes for database access.

Provides the table gateway contract used by the access-controlled data layer
and a Supabase implementation of it. Gateways never check permissions; the
access module decides what a principal may see or change.
"""

import logging
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import ConflictError, ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class BaseRepository(Generic[T]):
    """
    Base class for all Supabase repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db


@runtime_checkable
class TableGateway(Protocol):
    """
    Row-level storage contract.

    Rows are plain JSON-compatible dicts. Filters are column equality
    matches; a ``None`` filter value matches SQL NULL and a list value
    matches any of its elements (SQL IN). Each call is one statement, so
    a multi-row update or delete applies to every matched row or to none.
    """

    def select(
        self, table: str, filters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Return all rows of ``table`` matching ``filters``."""
        ...

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it as stored.

        Raises:
            ConflictError: If a unique constraint is violated
        """
        ...

    def update(
        self, table: str, filters: dict[str, Any], values: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them as stored."""
        ...

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete matching rows and return the deleted rows."""
        ...


class SupabaseTableGateway(BaseRepository[dict]):
    """TableGateway backed by the Supabase (PostgREST) client."""

    def _filtered(self, query: Any, filters: Optional[dict[str, Any]]) -> Any:
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            elif isinstance(value, list):
                query = query.in_(column, value)
            else:
                query = query.eq(column, value)
        return query

    def select(
        self, table: str, filters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        query = self._filtered(self._db.table(table).select("*"), filters)
        return list(self._execute(table, query).data or [])

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        result = self._execute(table, self._db.table(table).insert(row))
        return result.data[0] if result.data else dict(row)

    def update(
        self, table: str, filters: dict[str, Any], values: dict[str, Any]
    ) -> list[dict[str, Any]]:
        query = self._filtered(self._db.table(table).update(values), filters)
        return list(self._execute(table, query).data or [])

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        query = self._filtered(self._db.table(table).delete(), filters)
        return list(self._execute(table, query).data or [])

    def _execute(self, table: str, query: Any) -> Any:
        try:
            return query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(table)
            logger.error("Supabase request on %s failed: %s", table, e.message)
            raise ExternalServiceError(
                f"Database request failed for {table}",
                service="supabase",
                details={"code": e.code},
            )
