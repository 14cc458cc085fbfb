"""Row-level policy evaluation.

Two entry points:

``visible_clause`` / ``scoped_select``
    Build the WHERE clause every read goes through. Rows the caller may not
    see are filtered out; reads never raise for denied rows.

``decide`` / ``authorize``
    Evaluate one operation against one concrete row. ``authorize`` raises
    ``AuthorizationError`` on DENY and is what every mutation calls.

The service role bypasses every policy. Any other caller is identified only
through ``resolve_requester``, a privileged lookup that never passes through
this module.
"""

import contextlib
from contextvars import ContextVar
from typing import FrozenSet, Iterator, Type

from libs.common.logging import get_logger
from libs.db.base import Base
from services.fitness_service.errors import AuthorizationError, PolicyReentryError
from services.fitness_service.policies.context import Decision, Operation, RequestContext
from services.fitness_service.policies.identity import resolve_requester
from services.fitness_service.policies.rules import get_policy
from sqlalchemy import ColumnElement, Select, false, select, true
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Tables whose policy is currently being evaluated in this task.
_evaluating: ContextVar[FrozenSet[str]] = ContextVar(
    "policy_evaluating", default=frozenset()
)


@contextlib.contextmanager
def _evaluating_table(table: str) -> Iterator[None]:
    active = _evaluating.get()
    if table in active:
        raise PolicyReentryError(
            f"Policy evaluation for '{table}' re-entered itself"
        )
    token = _evaluating.set(active | {table})
    try:
        yield
    finally:
        _evaluating.reset(token)


async def visible_clause(
    db: AsyncSession, ctx: RequestContext, model: Type[Base]
) -> ColumnElement[bool]:
    policy = get_policy(model)
    if ctx.is_service_role:
        return true()
    with _evaluating_table(policy.table):
        identity = await resolve_requester(db, ctx)
        if identity is None:
            return false()
        return policy.read_clause(identity.profile_id)


async def scoped_select(
    db: AsyncSession, ctx: RequestContext, model: Type[Base]
) -> Select:
    """``select(model)`` already restricted to rows the caller may read."""
    return select(model).where(await visible_clause(db, ctx, model))


async def decide(
    db: AsyncSession, ctx: RequestContext, operation: Operation, row: Base
) -> Decision:
    policy = get_policy(type(row))
    if ctx.is_service_role:
        return Decision.ALLOW

    with _evaluating_table(policy.table):
        identity = await resolve_requester(db, ctx)
        if operation is Operation.INSERT:
            allowed = await policy.allows_insert(db, ctx, identity, row)
        else:
            allowed = await policy.allows_existing(db, identity, operation, row)

    if not allowed:
        logger.debug(
            "Policy denied %s on %s",
            operation.value,
            policy.table,
        )
        return Decision.DENY
    return Decision.ALLOW


async def authorize(
    db: AsyncSession, ctx: RequestContext, operation: Operation, row: Base
) -> None:
    if await decide(db, ctx, operation, row) is Decision.DENY:
        raise AuthorizationError()
