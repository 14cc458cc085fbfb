"""Internal service-to-service endpoints.

Called with a service-role JWT by the identity side of the app, never by
frontend clients. Row policies are bypassed for these callers.
"""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_service_role
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.fitness_service.policies import RequestContext
from services.fitness_service.schemas import (
    AccountClosedResponse,
    AdminLinkRequest,
    RelationshipResponse,
)
from services.fitness_service.services.profiles import close_account
from services.fitness_service.services.relationships import link_child
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/internal", tags=["internal-fitness"])


@router.post("/accounts/{auth_user_id}/close", response_model=AccountClosedResponse)
async def internal_close_account(
    auth_user_id: str,
    _service: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete the login's profile; relationships and records cascade."""
    closed = await close_account(db, RequestContext.service(), auth_user_id)
    return AccountClosedResponse(auth_user_id=auth_user_id, closed=closed)


@router.post(
    "/relationships",
    response_model=RelationshipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def internal_link_child(
    body: AdminLinkRequest,
    _service: AuthUser = Depends(require_service_role),
    db: AsyncSession = Depends(get_async_db),
):
    """Administrative link, e.g. re-attaching an orphaned child to a guardian."""
    relationship = await link_child(
        db,
        RequestContext.service(),
        parent_id=body.parent_id,
        child_id=body.child_id,
        consent=body.consent_given,
        kind=body.relationship_type,
    )
    logger.info("Administrative link created: relationship %s", relationship.id)
    return relationship
