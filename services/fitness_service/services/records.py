"""Reads and deletes over family-scoped records.

Reads filter through the row policies and simply come back empty for
profiles the caller can't see.
"""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.fitness_service.errors import AuthorizationError
from services.fitness_service.models import (
    Achievement,
    ExerciseSession,
    UserAchievement,
    UserAdventure,
    UserProgress,
)
from services.fitness_service.policies import (
    Operation,
    RequestContext,
    authorize,
    scoped_select,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_SESSION_LIMIT = 50


async def get_progress(
    db: AsyncSession, ctx: RequestContext, profile_id: uuid.UUID
) -> Optional[UserProgress]:
    query = await scoped_select(db, ctx, UserProgress)
    result = await db.execute(query.where(UserProgress.profile_id == profile_id))
    return result.scalar_one_or_none()


async def list_sessions(
    db: AsyncSession,
    ctx: RequestContext,
    profile_id: uuid.UUID,
    *,
    limit: int = DEFAULT_SESSION_LIMIT,
    offset: int = 0,
) -> list[ExerciseSession]:
    query = await scoped_select(db, ctx, ExerciseSession)
    result = await db.execute(
        query.where(ExerciseSession.profile_id == profile_id)
        .order_by(ExerciseSession.completed_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_user_achievements(
    db: AsyncSession, ctx: RequestContext, profile_id: uuid.UUID
) -> list[tuple[UserAchievement, Achievement]]:
    query = await scoped_select(db, ctx, UserAchievement)
    result = await db.execute(
        query.add_columns(Achievement)
        .join(Achievement, Achievement.id == UserAchievement.achievement_id)
        .where(UserAchievement.profile_id == profile_id)
        .order_by(UserAchievement.earned_at.desc())
    )
    return [(earned, achievement) for earned, achievement in result.all()]


async def list_adventures(
    db: AsyncSession, ctx: RequestContext, profile_id: uuid.UUID
) -> list[UserAdventure]:
    query = await scoped_select(db, ctx, UserAdventure)
    result = await db.execute(
        query.where(UserAdventure.profile_id == profile_id).order_by(
            UserAdventure.last_activity_at.desc()
        )
    )
    return list(result.scalars().all())


async def list_achievement_catalog(db: AsyncSession) -> list[Achievement]:
    """Active achievements. The catalog is shared content, not family data."""
    result = await db.execute(
        select(Achievement)
        .where(Achievement.is_active.is_(True))
        .order_by(Achievement.metric, Achievement.threshold_value)
    )
    return list(result.scalars().all())


async def delete_session(
    db: AsyncSession, ctx: RequestContext, session_id: uuid.UUID
) -> None:
    """Delete a session. Aggregates already credited are left as they are."""
    session = await db.get(ExerciseSession, session_id)
    if session is None:
        raise AuthorizationError()
    await authorize(db, ctx, Operation.DELETE, session)

    await db.delete(session)
    await db.commit()
    logger.info("Deleted session %s for profile %s", session_id, session.profile_id)
