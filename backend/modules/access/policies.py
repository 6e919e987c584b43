"""
Row-level access policies.

One predicate per protected table. Each predicate takes the request context,
the operation, and the candidate row (for inserts and updates, the row as it
would be written) and returns True to allow. Predicates are pure: they never
read storage and never raise for malformed rows.
"""

from typing import Any, Callable, Mapping

from shared.models import Principal, Role

from .models import AccessContext, Decision, Operation, Table

Row = Mapping[str, Any]
Policy = Callable[[AccessContext, Operation, Row], bool]


def profile_policy(context: AccessContext, operation: Operation, row: Row) -> bool:
    """A principal may read, create and edit only its own profile."""
    if operation == Operation.DELETE:
        return False
    return row.get("auth_user_id") == context.principal.id


def like_policy(context: AccessContext, operation: Operation, row: Row) -> bool:
    """Likes belong to the profile in ``user_id``; they are never edited."""
    if operation == Operation.UPDATE or context.profile_id is None:
        return False
    return row.get("user_id") == context.profile_id


def course_policy(context: AccessContext, operation: Operation, row: Row) -> bool:
    """Free courses are public; premium courses need an active subscription."""
    if operation != Operation.SELECT:
        return False
    return not bool(row.get("premium")) or context.subscription_active


def subscription_policy(context: AccessContext, operation: Operation, row: Row) -> bool:
    """Subscription rows are readable by their principal, writable by the backend only."""
    if operation != Operation.SELECT:
        return False
    return row.get("principal_id") == context.principal.id


def processed_event_policy(context: AccessContext, operation: Operation, row: Row) -> bool:
    return False


POLICIES: dict[Table, Policy] = {
    Table.PROFILES: profile_policy,
    Table.LIKES: like_policy,
    Table.COURSES: course_policy,
    Table.SUBSCRIPTIONS: subscription_policy,
    Table.PROCESSED_EVENTS: processed_event_policy,
}


def is_valid_principal(principal: Any) -> bool:
    """A usable principal has a non-blank id and a known role."""
    return (
        isinstance(principal, Principal)
        and isinstance(principal.id, str)
        and bool(principal.id.strip())
        and isinstance(principal.role, Role)
    )


def evaluate(
    context: AccessContext,
    table: Table | str,
    operation: Operation | str,
    row: Row,
) -> Decision:
    """
    Decide whether the requester may perform ``operation`` on ``row``.

    Missing or malformed principals, unknown tables and unknown operations
    are denied. Elevated principals (admin, service) are always allowed.
    """
    if not is_valid_principal(context.principal):
        return Decision.DENY
    if context.principal.is_elevated:
        return Decision.ALLOW

    try:
        policy = POLICIES[Table(table)]
        op = Operation(operation)
    except (ValueError, KeyError):
        return Decision.DENY

    return Decision.ALLOW if policy(context, op, row) else Decision.DENY
