"""Activity recording and progress read endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from libs.db.session import get_async_db
from services.fitness_service.dependencies import get_request_context
from services.fitness_service.errors import ValidationError
from services.fitness_service.policies import RequestContext
from services.fitness_service.schemas import (
    ActivityRecordedResponse,
    AdventureProgressResponse,
    EarnedAchievementResponse,
    ProgressResponse,
    SessionCreate,
    SessionResponse,
)
from services.fitness_service.services.progress import record_activity
from services.fitness_service.services.records import (
    delete_session,
    get_progress,
    list_adventures,
    list_sessions,
    list_user_achievements,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/progress", tags=["progress"])


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@router.post(
    "/sessions",
    response_model=ActivityRecordedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_session(
    body: SessionCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a completed exercise for the caller or one of their children."""
    profile_id = body.profile_id
    if profile_id is None:
        if ctx.identity is None:
            raise ValidationError("Register a profile before recording activity")
        profile_id = ctx.identity.profile_id

    result = await record_activity(
        db,
        ctx,
        profile_id=profile_id,
        exercise_id=body.exercise_id,
        fun_rating=body.fun_rating,
        points_earned=body.points_earned,
        duration_seconds=body.duration_seconds,
        effort_rating=body.effort_rating,
        sets_completed=body.sets_completed,
        reps_completed=body.reps_completed,
        difficulty_modifier=body.difficulty_modifier,
        notes=body.notes,
        adventure_id=body.adventure_id,
        adventure_total_exercises=body.adventure_total_exercises,
    )
    return ActivityRecordedResponse(
        session=SessionResponse.model_validate(result.session),
        progress=ProgressResponse.model_validate(result.progress),
        unlocked_achievement_ids=[item.achievement_id for item in result.unlocked],
        adventure=(
            AdventureProgressResponse.model_validate(result.adventure)
            if result.adventure is not None
            else None
        ),
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_session(
    session_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_session(db, ctx, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Per-profile reads (empty or 404 when the profile isn't visible)
# ---------------------------------------------------------------------------


@router.get("/{profile_id}", response_model=ProgressResponse)
async def read_progress(
    profile_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    progress = await get_progress(db, ctx, profile_id)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Progress not found"
        )
    return progress


@router.get("/{profile_id}/sessions", response_model=list[SessionResponse])
async def read_sessions(
    profile_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_sessions(db, ctx, profile_id, limit=limit, offset=offset)


@router.get(
    "/{profile_id}/achievements", response_model=list[EarnedAchievementResponse]
)
async def read_earned_achievements(
    profile_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await list_user_achievements(db, ctx, profile_id)
    return [
        EarnedAchievementResponse(
            id=earned.id,
            achievement_id=achievement.id,
            code=achievement.code,
            title=achievement.title,
            icon=achievement.icon,
            points_awarded=earned.points_awarded,
            earned_from_session_id=earned.earned_from_session_id,
            is_new=earned.is_new,
            earned_at=earned.earned_at,
        )
        for earned, achievement in rows
    ]


@router.get(
    "/{profile_id}/adventures", response_model=list[AdventureProgressResponse]
)
async def read_adventures(
    profile_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_adventures(db, ctx, profile_id)
