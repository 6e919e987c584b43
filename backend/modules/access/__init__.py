"""
Access control module.

Decides ALLOW/DENY for every row a principal reads or writes.

Public API:
- evaluate: Pure policy decision for one row
- AccessControlledTables: Data layer applying the policies to every call
- ISubscriptionChecker: What the data layer needs to gate premium content
- AccessDeniedError: Raised for writes that reach no permitted row
"""

from .exceptions import AccessDeniedError
from .interfaces import ISubscriptionChecker
from .models import AccessContext, Decision, Operation, Table
from .policies import POLICIES, evaluate
from .service import AccessControlledTables

__all__ = [
    "AccessDeniedError",
    "ISubscriptionChecker",
    "AccessContext",
    "Decision",
    "Operation",
    "Table",
    "POLICIES",
    "evaluate",
    "AccessControlledTables",
]
