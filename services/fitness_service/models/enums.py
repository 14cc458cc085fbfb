"""Enums for the Fitness Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class RelationshipKind(str, enum.Enum):
    PARENT = "parent"
    GUARDIAN = "guardian"


class AdventureStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"


class AchievementMetric(str, enum.Enum):
    """Aggregate field an achievement threshold is compared against."""

    TOTAL_POINTS = "total_points"
    TOTAL_EXERCISES = "total_exercises"
    STREAK_DAYS = "streak_days"
    LONGEST_STREAK = "longest_streak"


class DifficultyModifier(str, enum.Enum):
    EASIER = "easier"
    NORMAL = "normal"
    HARDER = "harder"
