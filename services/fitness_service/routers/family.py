"""Family endpoints: child onboarding and the caller's relationships."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from libs.db.session import get_async_db
from services.fitness_service.dependencies import get_request_context
from services.fitness_service.errors import ValidationError
from services.fitness_service.policies import RequestContext
from services.fitness_service.schemas import (
    ChildOnboardRequest,
    ChildOnboardResponse,
    ProfileResponse,
    RelationshipResponse,
)
from services.fitness_service.services.onboarding import onboard_child
from services.fitness_service.services.relationships import (
    children_of,
    deactivate,
    parents_of,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/family", tags=["family"])


def _require_profile(ctx: RequestContext) -> uuid.UUID:
    if ctx.identity is None:
        raise ValidationError("Register a profile before managing a family")
    return ctx.identity.profile_id


@router.post(
    "/children",
    response_model=ChildOnboardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_child(
    body: ChildOnboardRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a child profile with parental consent, linked to the caller."""
    result = await onboard_child(
        db,
        ctx,
        parent_id=_require_profile(ctx),
        display_name=body.display_name,
        date_of_birth=body.date_of_birth,
        kind=body.relationship_type,
        preferred_language=body.preferred_language,
    )
    return ChildOnboardResponse(
        child=ProfileResponse.model_validate(result.child),
        relationship=RelationshipResponse.model_validate(result.relationship),
    )


@router.get("/children", response_model=list[RelationshipResponse])
async def list_my_children(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    if ctx.identity is None:
        return []
    return await children_of(db, ctx, ctx.identity.profile_id)


@router.get("/parents", response_model=list[RelationshipResponse])
async def list_my_parents(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    if ctx.identity is None:
        return []
    return await parents_of(db, ctx, ctx.identity.profile_id)


@router.delete("/children/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_child(
    child_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    """Deactivate the caller's link to a child. Data already shared stays shared."""
    await deactivate(db, ctx, parent_id=_require_profile(ctx), child_id=child_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
