"""Privileged requester resolution.

Maps a login identifier to a profile id with a plain query that is never
passed through the policy evaluator. This is the only place the evaluator
learns "who is asking", so no rule ever has to read the profiles table to
find out.
"""

from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.retry import RetryPolicy, retry_async
from services.fitness_service.models import Profile
from services.fitness_service.policies.context import RequestContext, RequesterIdentity
from sqlalchemy import select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError)


def lookup_retry_policy() -> RetryPolicy:
    settings = get_settings()
    return RetryPolicy(
        max_attempts=settings.PROFILE_LOOKUP_MAX_ATTEMPTS,
        base_delay=settings.PROFILE_LOOKUP_BACKOFF_SECONDS,
    )


async def resolve_requester(
    db: AsyncSession, ctx: RequestContext
) -> Optional[RequesterIdentity]:
    """Return the caller's profile identity, or None when there is none.

    The result is cached on ``ctx``; a new request always resolves afresh.
    Call this before doing any writes in the session: a transient failure
    rolls the session back before retrying.
    """
    if ctx.is_resolved:
        return ctx.identity
    if ctx.auth_user_id is None:
        ctx.remember(None)
        return None

    async def _lookup():
        try:
            result = await db.execute(
                select(Profile.id, Profile.is_child).where(
                    Profile.auth_user_id == ctx.auth_user_id
                )
            )
            return result.one_or_none()
        except TRANSIENT_DB_ERRORS:
            await db.rollback()
            raise

    row = await retry_async(
        _lookup,
        policy=lookup_retry_policy(),
        retry_on=TRANSIENT_DB_ERRORS,
        label="requester lookup",
    )

    identity = (
        RequesterIdentity(profile_id=row.id, is_child=row.is_child) if row else None
    )
    ctx.remember(identity)
    return identity
