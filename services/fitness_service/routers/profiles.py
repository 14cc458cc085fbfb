"""Profile endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.fitness_service.dependencies import get_request_context
from services.fitness_service.policies import RequestContext
from services.fitness_service.schemas import (
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
)
from services.fitness_service.services.profiles import (
    create_profile,
    get_my_profile,
    get_profile,
    list_profiles,
    update_profile,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/profiles", tags=["profiles"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found"
    )


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register_profile(
    body: ProfileCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    """Register the caller's own (parent) profile."""
    return await create_profile(
        db,
        ctx,
        display_name=body.display_name,
        email=body.email,
        date_of_birth=body.date_of_birth,
        preferred_language=body.preferred_language,
        is_child=body.is_child,
    )


@router.get("/me", response_model=ProfileResponse)
async def read_my_profile(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_my_profile(db, ctx)
    if profile is None:
        raise _not_found()
    return profile


@router.get("", response_model=list[ProfileResponse])
async def read_visible_profiles(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    """The caller's own profile plus the profiles of actively linked children."""
    return await list_profiles(db, ctx)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def read_profile(
    profile_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await get_profile(db, ctx, profile_id)
    if profile is None:
        raise _not_found()
    return profile


@router.patch("/{profile_id}", response_model=ProfileResponse)
async def patch_profile(
    profile_id: uuid.UUID,
    body: ProfileUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    return await update_profile(db, ctx, profile_id, body.to_patch())
