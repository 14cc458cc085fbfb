"""Progress aggregator: applies a completed activity to the rolling aggregate.

``record_activity`` is the only writer of ``user_progress`` counters. The
session insert is authorized like any other mutation; aggregate, per-exercise,
adventure and achievement rows are then maintained as a system step on the
owner's behalf, under a row lock on the owner's ``user_progress`` row.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import local_today, utc_now
from libs.common.logging import get_logger
from services.fitness_service.errors import (
    AtomicityError,
    AuthorizationError,
    FitnessError,
    ValidationError,
)
from services.fitness_service.models import (
    Achievement,
    AchievementMetric,
    AdventureStatus,
    DifficultyModifier,
    ExerciseProgress,
    ExerciseSession,
    Profile,
    UserAchievement,
    UserAdventure,
    UserProgress,
)
from services.fitness_service.policies import (
    Operation,
    RequestContext,
    authorize,
    resolve_requester,
)
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

RATING_MIN = 1
RATING_MAX = 5

_METRIC_FIELDS = {
    AchievementMetric.TOTAL_POINTS: "total_points",
    AchievementMetric.TOTAL_EXERCISES: "total_exercises_completed",
    AchievementMetric.STREAK_DAYS: "current_streak_days",
    AchievementMetric.LONGEST_STREAK: "longest_streak_days",
}


@dataclass
class ActivityResult:
    session: ExerciseSession
    progress: UserProgress
    unlocked: list[UserAchievement] = field(default_factory=list)
    adventure: Optional[UserAdventure] = None


# ---------------------------------------------------------------------------
# Pure calculations
# ---------------------------------------------------------------------------


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero (SQL ``ROUND``)."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_streak(
    last_activity_date: Optional[date], today: date, current_streak: int
) -> int:
    if last_activity_date is None:
        return 1
    if last_activity_date == today:
        return current_streak
    if last_activity_date == today - timedelta(days=1):
        return current_streak + 1
    return 1


def running_average(old_average: float, old_count: int, new_rating: int) -> float:
    """Fold ``new_rating`` into an average over ``old_count`` prior ratings.

    ``old_count`` is the count *before* this rating is added.
    """
    if old_count <= 0:
        return float(new_rating)
    total = Decimal(str(old_average)) * old_count + new_rating
    return float(round_half_up(total / (old_count + 1)))


def minutes_for(duration_seconds: int) -> int:
    return round_half_up(Decimal(duration_seconds) / 60)


def goals_for(is_child: bool) -> tuple[int, int]:
    """(weekly points goal, monthly exercises goal) for a new aggregate."""
    settings = get_settings()
    if is_child:
        return settings.CHILD_WEEKLY_POINTS_GOAL, settings.CHILD_MONTHLY_GOAL_EXERCISES
    return settings.PARENT_WEEKLY_POINTS_GOAL, settings.PARENT_MONTHLY_GOAL_EXERCISES


def apply_activity(
    progress: UserProgress,
    *,
    today: date,
    points: int,
    fun_rating: int,
    minutes: int,
) -> None:
    old_count = progress.total_exercises_completed or 0
    streak = compute_streak(
        progress.last_activity_date, today, progress.current_streak_days or 0
    )

    progress.average_fun_rating = running_average(
        progress.average_fun_rating or 0.0, old_count, fun_rating
    )
    progress.total_points = (progress.total_points or 0) + points
    progress.total_exercises_completed = old_count + 1
    progress.total_minutes = (progress.total_minutes or 0) + minutes
    progress.current_streak_days = streak
    progress.longest_streak_days = max(progress.longest_streak_days or 0, streak)
    progress.last_activity_date = today


# ---------------------------------------------------------------------------
# Aggregate row management
# ---------------------------------------------------------------------------


def _insert_for(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


async def ensure_progress(
    db: AsyncSession, *, profile_id: uuid.UUID, is_child: bool
) -> None:
    """Create the profile's aggregate row if missing.

    Uses ``INSERT ... ON CONFLICT DO NOTHING`` so two writers racing to
    create the row both succeed and end up sharing it.
    """
    weekly, monthly = goals_for(is_child)
    insert = _insert_for(db)
    stmt = (
        insert(UserProgress)
        .values(
            id=uuid.uuid4(),
            profile_id=profile_id,
            weekly_points_goal=weekly,
            monthly_goal_exercises=monthly,
        )
        .on_conflict_do_nothing(index_elements=["profile_id"])
    )
    await db.execute(stmt)


async def lock_progress(db: AsyncSession, profile_id: uuid.UUID) -> UserProgress:
    result = await db.execute(
        select(UserProgress)
        .where(UserProgress.profile_id == profile_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _apply_exercise_progress(
    db: AsyncSession,
    *,
    profile_id: uuid.UUID,
    exercise_id: uuid.UUID,
    fun_rating: int,
    minutes: int,
    now: datetime,
) -> ExerciseProgress:
    result = await db.execute(
        select(ExerciseProgress).where(
            ExerciseProgress.profile_id == profile_id,
            ExerciseProgress.exercise_id == exercise_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = ExerciseProgress(
            profile_id=profile_id,
            exercise_id=exercise_id,
            times_completed=0,
            best_fun_rating=0,
            total_time_minutes=0,
        )
        db.add(row)

    row.times_completed += 1
    row.best_fun_rating = max(row.best_fun_rating, fun_rating)
    row.total_time_minutes += minutes
    row.last_completed_at = now
    return row


async def _apply_adventure(
    db: AsyncSession,
    progress: UserProgress,
    *,
    adventure_id: uuid.UUID,
    total_exercises: Optional[int],
    points: int,
    now: datetime,
) -> UserAdventure:
    result = await db.execute(
        select(UserAdventure).where(
            UserAdventure.profile_id == progress.profile_id,
            UserAdventure.adventure_id == adventure_id,
        )
    )
    adventure = result.scalar_one_or_none()
    if adventure is None:
        adventure = UserAdventure(
            profile_id=progress.profile_id,
            adventure_id=adventure_id,
            status=AdventureStatus.IN_PROGRESS,
            exercises_completed=0,
            total_points_earned=0,
            progress_percentage=0.0,
            started_at=now,
        )
        db.add(adventure)

    adventure.exercises_completed += 1
    adventure.total_points_earned += points
    adventure.last_activity_at = now
    if total_exercises is not None:
        adventure.total_exercises = total_exercises

    if adventure.status in (AdventureStatus.NOT_STARTED, AdventureStatus.PAUSED):
        adventure.status = AdventureStatus.IN_PROGRESS
        adventure.started_at = adventure.started_at or now

    if adventure.total_exercises:
        adventure.progress_percentage = min(
            100.0,
            round(adventure.exercises_completed * 100.0 / adventure.total_exercises, 2),
        )
        if (
            adventure.exercises_completed >= adventure.total_exercises
            and adventure.status != AdventureStatus.COMPLETED
        ):
            adventure.status = AdventureStatus.COMPLETED
            adventure.completed_at = now
            progress.adventures_completed += 1
    return adventure


async def unlock_achievements(
    db: AsyncSession,
    progress: UserProgress,
    *,
    session_id: Optional[uuid.UUID] = None,
) -> list[UserAchievement]:
    """Record every active achievement the aggregate now qualifies for.

    Thresholds are checked against one snapshot of the aggregate; bonus
    points are added after all checks, so a bonus never unlocks another
    achievement within the same call.
    """
    snapshot = {
        metric: getattr(progress, column) or 0
        for metric, column in _METRIC_FIELDS.items()
    }
    already_earned = select(UserAchievement.achievement_id).where(
        UserAchievement.profile_id == progress.profile_id
    )
    result = await db.execute(
        select(Achievement)
        .where(
            Achievement.is_active.is_(True),
            Achievement.id.not_in(already_earned),
        )
        .order_by(Achievement.threshold_value, Achievement.code)
    )

    unlocked: list[UserAchievement] = []
    for achievement in result.scalars().all():
        if snapshot[achievement.metric] < achievement.threshold_value:
            continue
        earned = UserAchievement(
            profile_id=progress.profile_id,
            achievement_id=achievement.id,
            points_awarded=achievement.points_reward,
            earned_from_session_id=session_id,
            is_new=True,
        )
        db.add(earned)
        unlocked.append(earned)

    if unlocked:
        progress.total_points += sum(item.points_awarded for item in unlocked)
        progress.achievements_earned += len(unlocked)
    return unlocked


# ---------------------------------------------------------------------------
# Public operation
# ---------------------------------------------------------------------------


def _check_bounds(name: str, value: Optional[int]) -> None:
    if value is not None and not RATING_MIN <= value <= RATING_MAX:
        raise ValidationError(f"{name} must be between {RATING_MIN} and {RATING_MAX}")


async def record_activity(
    db: AsyncSession,
    ctx: RequestContext,
    *,
    profile_id: uuid.UUID,
    exercise_id: uuid.UUID,
    fun_rating: int,
    points_earned: int = 0,
    duration_seconds: int = 0,
    effort_rating: Optional[int] = None,
    sets_completed: Optional[int] = None,
    reps_completed: Optional[int] = None,
    difficulty_modifier: Optional[DifficultyModifier] = None,
    notes: Optional[str] = None,
    adventure_id: Optional[uuid.UUID] = None,
    adventure_total_exercises: Optional[int] = None,
    today: Optional[date] = None,
) -> ActivityResult:
    """Record one completed exercise for ``profile_id`` and update its aggregate.

    The caller must be the profile's owner or an active parent. Everything is
    committed together; on any failure nothing is persisted.
    """
    _check_bounds("fun_rating", fun_rating)
    _check_bounds("effort_rating", effort_rating)
    if points_earned < 0:
        raise ValidationError("points_earned cannot be negative")
    if duration_seconds < 0:
        raise ValidationError("duration_seconds cannot be negative")

    identity = await resolve_requester(db, ctx)
    owner = await db.get(Profile, profile_id)
    if owner is None:
        raise AuthorizationError()

    now = utc_now()
    session = ExerciseSession(
        profile_id=profile_id,
        exercise_id=exercise_id,
        adventure_id=adventure_id,
        duration_seconds=duration_seconds,
        sets_completed=sets_completed,
        reps_completed=reps_completed,
        difficulty_modifier=difficulty_modifier,
        effort_rating=effort_rating,
        fun_rating=fun_rating,
        notes=notes,
        points_earned=points_earned,
        recorded_by_profile_id=identity.profile_id if identity else None,
        completed_at=now,
    )
    await authorize(db, ctx, Operation.INSERT, session)
    if not owner.usable_for_family_writes:
        raise ValidationError("Parental consent has not been recorded for this profile")

    today = today or local_today()
    minutes = minutes_for(duration_seconds)

    try:
        db.add(session)
        await db.flush()

        await ensure_progress(db, profile_id=profile_id, is_child=owner.is_child)
        progress = await lock_progress(db, profile_id)
        apply_activity(
            progress,
            today=today,
            points=points_earned,
            fun_rating=fun_rating,
            minutes=minutes,
        )
        await _apply_exercise_progress(
            db,
            profile_id=profile_id,
            exercise_id=exercise_id,
            fun_rating=fun_rating,
            minutes=minutes,
            now=now,
        )
        adventure = None
        if adventure_id is not None:
            adventure = await _apply_adventure(
                db,
                progress,
                adventure_id=adventure_id,
                total_exercises=adventure_total_exercises,
                points=points_earned,
                now=now,
            )
        await db.flush()

        unlocked = await unlock_achievements(db, progress, session_id=session.id)
        await db.commit()
    except FitnessError:
        await db.rollback()
        raise
    except Exception as exc:
        await db.rollback()
        logger.exception("Recording activity for profile %s failed", profile_id)
        raise AtomicityError() from exc

    await db.refresh(session)
    await db.refresh(progress)

    logger.info(
        "Recorded session %s for profile %s (points=%d, streak=%d, unlocked=%d)",
        session.id,
        profile_id,
        points_earned,
        progress.current_streak_days,
        len(unlocked),
    )
    for earned in unlocked:
        logger.info(
            "Achievement %s unlocked for profile %s",
            earned.achievement_id,
            profile_id,
        )
    return ActivityResult(
        session=session, progress=progress, unlocked=unlocked, adventure=adventure
    )
