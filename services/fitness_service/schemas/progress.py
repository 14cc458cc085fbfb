"""Progress, session and achievement schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.fitness_service.models.enums import (
    AchievementMetric,
    AdventureStatus,
    DifficultyModifier,
)


class SessionCreate(BaseModel):
    """A completed exercise, logged by the profile itself or by its parent."""

    profile_id: Optional[uuid.UUID] = None  # defaults to the caller
    exercise_id: uuid.UUID
    fun_rating: int = Field(..., ge=1, le=5)
    effort_rating: Optional[int] = Field(None, ge=1, le=5)
    points_earned: int = Field(0, ge=0)
    duration_seconds: int = Field(0, ge=0)
    sets_completed: Optional[int] = Field(None, ge=0)
    reps_completed: Optional[int] = Field(None, ge=0)
    difficulty_modifier: Optional[DifficultyModifier] = None
    notes: Optional[str] = Field(None, max_length=1000)
    adventure_id: Optional[uuid.UUID] = None
    adventure_total_exercises: Optional[int] = Field(None, ge=1)


class SessionResponse(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    exercise_id: uuid.UUID
    adventure_id: Optional[uuid.UUID] = None
    duration_seconds: int
    sets_completed: Optional[int] = None
    reps_completed: Optional[int] = None
    difficulty_modifier: Optional[DifficultyModifier] = None
    effort_rating: Optional[int] = None
    fun_rating: int
    notes: Optional[str] = None
    points_earned: int
    recorded_by_profile_id: Optional[uuid.UUID] = None
    completed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProgressResponse(BaseModel):
    profile_id: uuid.UUID
    total_points: int
    total_exercises_completed: int
    total_minutes: int
    current_streak_days: int
    longest_streak_days: int
    last_activity_date: Optional[date] = None
    average_fun_rating: float
    achievements_earned: int
    adventures_completed: int
    weekly_points_goal: int
    monthly_goal_exercises: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdventureProgressResponse(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    adventure_id: uuid.UUID
    status: AdventureStatus
    exercises_completed: int
    total_exercises: Optional[int] = None
    total_points_earned: int
    progress_percentage: float
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_activity_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AchievementResponse(BaseModel):
    id: uuid.UUID
    code: str
    title: str
    description: Optional[str] = None
    metric: AchievementMetric
    threshold_value: int
    points_reward: int
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EarnedAchievementResponse(BaseModel):
    id: uuid.UUID
    achievement_id: uuid.UUID
    code: str
    title: str
    icon: Optional[str] = None
    points_awarded: int
    earned_from_session_id: Optional[uuid.UUID] = None
    is_new: bool
    earned_at: datetime


class ActivityRecordedResponse(BaseModel):
    session: SessionResponse
    progress: ProgressResponse
    unlocked_achievement_ids: list[uuid.UUID] = []
    adventure: Optional[AdventureProgressResponse] = None
