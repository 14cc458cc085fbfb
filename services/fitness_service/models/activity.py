"""Family-scoped activity records: exercise sessions and adventure progress."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.fitness_service.models.enums import (
    AdventureStatus,
    DifficultyModifier,
    enum_values,
)
from services.fitness_service.models.types import GUID
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column


class ExerciseSession(Base):
    """One completed exercise. Exercise/adventure ids point at catalog tables
    owned by the content side of the app."""

    __tablename__ = "exercise_sessions"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(GUID, index=True, nullable=False)
    adventure_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID, nullable=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sets_completed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reps_completed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty_modifier: Mapped[Optional[DifficultyModifier]] = mapped_column(
        SAEnum(
            DifficultyModifier,
            name="difficulty_modifier_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    effort_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fun_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Profile that performed the insert (the parent when logged on a child's behalf)
    recorded_by_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID, nullable=True
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("fun_rating BETWEEN 1 AND 5", name="fun_rating_range"),
        CheckConstraint(
            "effort_rating IS NULL OR effort_rating BETWEEN 1 AND 5",
            name="effort_rating_range",
        ),
        CheckConstraint("points_earned >= 0", name="points_non_negative"),
        Index("ix_exercise_sessions_profile_completed", "profile_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return f"<ExerciseSession {self.id} profile={self.profile_id}>"


class UserAdventure(Base):
    """Progress of one profile through one adventure storyline."""

    __tablename__ = "user_adventures"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    adventure_id: Mapped[uuid.UUID] = mapped_column(GUID, nullable=False)
    status: Mapped[AdventureStatus] = mapped_column(
        SAEnum(
            AdventureStatus,
            name="adventure_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=AdventureStatus.NOT_STARTED,
        nullable=False,
    )
    exercises_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_exercises: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    progress_percentage: Mapped[float] = mapped_column(
        Float, default=0.0, nullable=False
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "adventure_id", name="uq_user_adventure"),
        Index("ix_user_adventures_profile_status", "profile_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<UserAdventure {self.profile_id} adventure={self.adventure_id} {self.status}>"
