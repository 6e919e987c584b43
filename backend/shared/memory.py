"""
In-memory table gateway.

For testing and local development. Mirrors the uniqueness constraints and
column defaults of the Postgres schema in ``migrations/`` so that code running
against it sees the same conflicts it would see in production.
"""

import copy
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional

from .exceptions import ConflictError

# Unique constraints per table (each tuple is one constraint).
UNIQUE_CONSTRAINTS: dict[str, list[tuple[str, ...]]] = {
    "users": [("id",), ("auth_user_id",)],
    "courses": [("id",)],
    "courses_likes": [("id",), ("user_id", "course_id")],
    "subscriptions": [("principal_id",), ("subscription_ref",)],
    "processed_events": [("event_id",)],
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


COLUMN_DEFAULTS: dict[str, dict[str, Callable[[], Any]]] = {
    "users": {"id": _new_id, "created_at": _now, "updated_at": _now},
    "courses": {"id": _new_id, "created_at": _now},
    "courses_likes": {"id": _new_id, "created_at": _now},
    "subscriptions": {"updated_at": _now},
    "processed_events": {"received_at": _now, "processed": lambda: False},
}


def _matches(row: dict[str, Any], filters: Optional[dict[str, Any]]) -> bool:
    for column, value in (filters or {}).items():
        if isinstance(value, list):
            if row.get(column) not in value:
                return False
        elif row.get(column) != value:
            return False
    return True


class InMemoryTableGateway:
    """
    Thread-safe in-memory implementation of ``TableGateway``.

    Every call holds a re-entrant lock, and ``transaction()`` extends the lock
    over a block of calls, restoring the previous contents if the block raises.
    Transactions nest like savepoints.
    """

    def __init__(self) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["InMemoryTableGateway"]:
        """Run a block atomically; roll back all tables if it raises."""
        with self._lock:
            snapshot = copy.deepcopy(self._tables)
            try:
                yield self
            except BaseException:
                self._tables = snapshot
                raise

    def select(
        self, table: str, filters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(row)
                for row in self._tables.get(table, [])
                if _matches(row, filters)
            ]

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            stored = dict(row)
            for column, default in COLUMN_DEFAULTS.get(table, {}).items():
                if stored.get(column) is None:
                    stored[column] = default()
            rows = self._tables.setdefault(table, [])
            self._check_unique(table, rows, stored)
            rows.append(stored)
            return copy.deepcopy(stored)

    def update(
        self, table: str, filters: dict[str, Any], values: dict[str, Any]
    ) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._tables.get(table, [])
            targets = [row for row in rows if _matches(row, filters)]
            others = [row for row in rows if not _matches(row, filters)]
            updated = [{**row, **values} for row in targets]
            # Validate every new row before touching storage.
            checked: list[dict[str, Any]] = list(others)
            for row in updated:
                self._check_unique(table, checked, row)
                checked.append(row)
            for target, new_row in zip(targets, updated):
                target.clear()
                target.update(new_row)
            return [copy.deepcopy(row) for row in targets]

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._tables.get(table, [])
            removed = [row for row in rows if _matches(row, filters)]
            self._tables[table] = [row for row in rows if not _matches(row, filters)]
            return removed

    def _check_unique(
        self, table: str, rows: list[dict[str, Any]], candidate: dict[str, Any]
    ) -> None:
        for columns in UNIQUE_CONSTRAINTS.get(table, []):
            key = tuple(candidate.get(column) for column in columns)
            if any(value is None for value in key):
                continue
            for row in rows:
                if row is candidate:
                    continue
                if tuple(row.get(column) for column in columns) == key:
                    raise ConflictError(table, columns)
