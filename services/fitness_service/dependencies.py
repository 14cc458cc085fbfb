"""FastAPI dependencies shared by the fitness routers."""

from fastapi import Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.fitness_service.policies import RequestContext, resolve_requester
from sqlalchemy.ext.asyncio import AsyncSession


async def get_request_context(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> RequestContext:
    """Build the per-request context and resolve the caller's profile up front.

    Resolving here, before any handler work, keeps the lookup's retry from
    ever rolling back writes made later in the request.
    """
    ctx = RequestContext.for_user(current_user)
    await resolve_requester(db, ctx)
    return ctx
