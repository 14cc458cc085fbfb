"""Progress aggregates and achievements."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.fitness_service.models.enums import AchievementMetric, enum_values
from services.fitness_service.models.types import GUID
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column


class UserProgress(Base):
    """Rolling per-profile aggregate. Exactly one row per profile.

    Writers lock this row (``SELECT ... FOR UPDATE``) before touching the
    additive counters.
    """

    __tablename__ = "user_progress"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        GUID,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_exercises_completed: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_activity_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    average_fun_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    achievements_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    adventures_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weekly_points_goal: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    monthly_goal_exercises: Mapped[int] = mapped_column(
        Integer, default=20, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserProgress {self.profile_id} points={self.total_points}>"


class ExerciseProgress(Base):
    """Per-profile, per-exercise counters."""

    __tablename__ = "exercise_progress"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(GUID, nullable=False)
    times_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    best_fun_rating: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_time_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "exercise_id", name="uq_exercise_progress"),
    )


class Achievement(Base):
    """Achievement catalog entry. Not family-scoped: readable by everyone."""

    __tablename__ = "achievements"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metric: Mapped[AchievementMetric] = mapped_column(
        SAEnum(
            AchievementMetric,
            name="achievement_metric_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    threshold_value: Mapped[int] = mapped_column(Integer, nullable=False)
    points_reward: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Achievement {self.code} threshold={self.threshold_value}>"


class UserAchievement(Base):
    """An earned achievement (the family-scoped reward record)."""

    __tablename__ = "user_achievements"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    achievement_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False
    )
    points_awarded: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    earned_from_session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID, ForeignKey("exercise_sessions.id", ondelete="SET NULL"), nullable=True
    )
    # For UI notifications
    is_new: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "achievement_id", name="uq_user_achievement"),
        Index("ix_user_achievements_profile_earned", "profile_id", "earned_at"),
    )
