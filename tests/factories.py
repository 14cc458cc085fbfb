"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    parent = ProfileFactory.create(display_name="Ada")
    db_session.add(parent)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_login() -> str:
    return f"auth-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Profiles and relationships
# ---------------------------------------------------------------------------


class ProfileFactory:
    """A parent profile with its own login."""

    @staticmethod
    def create(**overrides):
        from services.fitness_service.models import Profile, default_privacy_settings

        defaults = {
            "id": _uuid(),
            "auth_user_id": _unique_login(),
            "email": None,
            "display_name": "Test Parent",
            "date_of_birth": None,
            "is_child": False,
            "parent_consent_given": False,
            "privacy_settings": default_privacy_settings(),
            "preferred_language": "en",
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Profile(**defaults)


class ChildProfileFactory:
    """A consented child profile (no login)."""

    @staticmethod
    def create(**overrides):
        defaults = {
            "auth_user_id": None,
            "display_name": "Test Child",
            "is_child": True,
            "parent_consent_given": True,
            "parent_consent_date": _now(),
        }
        defaults.update(overrides)
        return ProfileFactory.create(**defaults)


class RelationshipFactory:
    @staticmethod
    def create(parent_id=None, child_id=None, **overrides):
        from services.fitness_service.models import (
            ParentChildRelationship,
            RelationshipKind,
        )

        defaults = {
            "id": _uuid(),
            "parent_id": parent_id or _uuid(),
            "child_id": child_id or _uuid(),
            "relationship_type": RelationshipKind.PARENT,
            "consent_given": True,
            "consent_date": _now(),
            "active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ParentChildRelationship(**defaults)


# ---------------------------------------------------------------------------
# Family-scoped records
# ---------------------------------------------------------------------------


class UserProgressFactory:
    @staticmethod
    def create(profile_id=None, **overrides):
        from services.fitness_service.models import UserProgress

        defaults = {
            "id": _uuid(),
            "profile_id": profile_id or _uuid(),
            "total_points": 0,
            "total_exercises_completed": 0,
            "total_minutes": 0,
            "current_streak_days": 0,
            "longest_streak_days": 0,
            "last_activity_date": None,
            "average_fun_rating": 0.0,
            "achievements_earned": 0,
            "adventures_completed": 0,
            "weekly_points_goal": 100,
            "monthly_goal_exercises": 20,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return UserProgress(**defaults)


class ExerciseSessionFactory:
    @staticmethod
    def create(profile_id=None, **overrides):
        from services.fitness_service.models import ExerciseSession

        defaults = {
            "id": _uuid(),
            "profile_id": profile_id or _uuid(),
            "exercise_id": _uuid(),
            "adventure_id": None,
            "duration_seconds": 120,
            "fun_rating": 4,
            "points_earned": 10,
            "completed_at": _now(),
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ExerciseSession(**defaults)


class UserAdventureFactory:
    @staticmethod
    def create(profile_id=None, **overrides):
        from services.fitness_service.models import AdventureStatus, UserAdventure

        defaults = {
            "id": _uuid(),
            "profile_id": profile_id or _uuid(),
            "adventure_id": _uuid(),
            "status": AdventureStatus.IN_PROGRESS,
            "exercises_completed": 1,
            "total_exercises": 5,
            "total_points_earned": 10,
            "progress_percentage": 20.0,
            "started_at": _now(),
            "last_activity_at": _now(),
        }
        defaults.update(overrides)
        return UserAdventure(**defaults)


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class AchievementFactory:
    @staticmethod
    def create(**overrides):
        from services.fitness_service.models import Achievement, AchievementMetric

        defaults = {
            "id": _uuid(),
            "code": f"achievement-{uuid.uuid4().hex[:8]}",
            "title": "Test Achievement",
            "description": None,
            "metric": AchievementMetric.TOTAL_EXERCISES,
            "threshold_value": 1,
            "points_reward": 50,
            "icon": None,
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Achievement(**defaults)


class UserAchievementFactory:
    @staticmethod
    def create(profile_id=None, achievement_id=None, **overrides):
        from services.fitness_service.models import UserAchievement

        defaults = {
            "id": _uuid(),
            "profile_id": profile_id or _uuid(),
            "achievement_id": achievement_id or _uuid(),
            "points_awarded": 50,
            "earned_from_session_id": None,
            "is_new": True,
            "earned_at": _now(),
        }
        defaults.update(overrides)
        return UserAchievement(**defaults)
