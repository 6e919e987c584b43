"""
Access-controlled data layer.

Wraps a TableGateway so that every read and write is evaluated against the
table's policy for the principal passed in. Reads drop denied rows silently;
writes that reach no permitted row raise AccessDeniedError.
"""

import logging
from typing import Any, Optional

from shared.models import Principal
from shared.repository import TableGateway

from .exceptions import AccessDeniedError
from .interfaces import ISubscriptionChecker
from .models import AccessContext, Decision, Operation, Table
from .policies import evaluate, is_valid_principal

logger = logging.getLogger(__name__)

# Column identifying a single row in each table.
ROW_KEYS: dict[Table, str] = {
    Table.PROFILES: "id",
    Table.LIKES: "id",
    Table.COURSES: "id",
    Table.SUBSCRIPTIONS: "principal_id",
    Table.PROCESSED_EVENTS: "event_id",
}


class AccessControlledTables:
    """
    Row-level security enforced in the application tier.

    The gateway is expected to run with full privileges (service role); this
    class is the only thing standing between a principal and other
    principals' rows, so every public method takes the principal explicitly.
    """

    def __init__(
        self,
        gateway: TableGateway,
        subscriptions: Optional[ISubscriptionChecker] = None,
    ) -> None:
        self._gateway = gateway
        self._subscriptions = subscriptions

    def build_context(self, principal: Optional[Principal], table: Table) -> AccessContext:
        """
        Resolve the per-request facts a policy needs.

        Nothing is cached: profile ownership and subscription state are read
        on every call.
        """
        if not is_valid_principal(principal):
            return AccessContext(principal=None)
        if principal.is_elevated:
            return AccessContext(principal=principal)

        profile_id = None
        if table == Table.LIKES:
            profile_id = self._profile_id(principal)

        subscription_active = False
        if table == Table.COURSES and self._subscriptions is not None:
            subscription_active = self._subscriptions.has_active_subscription(principal.id)

        return AccessContext(
            principal=principal,
            profile_id=profile_id,
            subscription_active=subscription_active,
        )

    def select(
        self,
        principal: Optional[Principal],
        table: Table,
        filters: Optional[dict[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Return the rows matching ``filters`` that the principal may read."""
        context = self.build_context(principal, table)
        if context.principal is None:
            return []
        rows = self._gateway.select(table.value, filters)
        return [row for row in rows if self._allowed(context, table, Operation.SELECT, row)]

    def insert(
        self,
        principal: Optional[Principal],
        table: Table,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """Insert ``row`` if the principal may create it."""
        context = self.build_context(principal, table)
        if not self._allowed(context, table, Operation.INSERT, row):
            logger.debug("Denied insert on %s", table.value)
            raise AccessDeniedError(table.value)
        return self._gateway.insert(table.value, row)

    def update(
        self,
        principal: Optional[Principal],
        table: Table,
        filters: dict[str, Any],
        values: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update the permitted rows matching ``filters``.

        Both the current row and the resulting row must pass the policy.
        If any resulting row would be denied, nothing is written.
        """
        context = self.build_context(principal, table)
        targets = self._targets(context, table, Operation.UPDATE, filters)
        for row in targets:
            if not self._allowed(context, table, Operation.UPDATE, {**row, **values}):
                logger.debug("Denied update result on %s", table.value)
                raise AccessDeniedError(table.value)

        return self._gateway.update(table.value, self._key_filter(table, targets), values)

    def delete(
        self,
        principal: Optional[Principal],
        table: Table,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Delete the permitted rows matching ``filters``."""
        context = self.build_context(principal, table)
        targets = self._targets(context, table, Operation.DELETE, filters)

        return self._gateway.delete(table.value, self._key_filter(table, targets))

    def _targets(
        self,
        context: AccessContext,
        table: Table,
        operation: Operation,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        if context.principal is None:
            raise AccessDeniedError(table.value)
        rows = self._gateway.select(table.value, filters)
        targets = [row for row in rows if self._allowed(context, table, operation, row)]
        if not targets:
            logger.debug("No permitted %s rows for %s", table.value, operation.value)
            raise AccessDeniedError(table.value)
        return targets

    def _key_filter(self, table: Table, rows: list[dict[str, Any]]) -> dict[str, Any]:
        """One filter over every target row, so the write is a single statement."""
        key = ROW_KEYS[table]
        return {key: [row[key] for row in rows]}

    def _allowed(
        self,
        context: AccessContext,
        table: Table,
        operation: Operation,
        row: dict[str, Any],
    ) -> bool:
        return evaluate(context, table, operation, row) == Decision.ALLOW

    def _profile_id(self, principal: Principal) -> Optional[str]:
        rows = self._gateway.select(Table.PROFILES.value, {"auth_user_id": principal.id})
        return rows[0]["id"] if rows else None
