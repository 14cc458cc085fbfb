"""Fitness Service models package.

Re-exports all models and enums so that:
  - ``from services.fitness_service.models import Profile`` works
  - Alembic env.py sees every table through one import
  - SQLAlchemy's mapper registry sees every model class on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.fitness_service.models.activity import (  # noqa: F401
    ExerciseSession,
    UserAdventure,
)
from services.fitness_service.models.enums import (  # noqa: F401
    AchievementMetric,
    AdventureStatus,
    DifficultyModifier,
    RelationshipKind,
)
from services.fitness_service.models.profile import (  # noqa: F401
    Profile,
    default_privacy_settings,
)
from services.fitness_service.models.progress import (  # noqa: F401
    Achievement,
    ExerciseProgress,
    UserAchievement,
    UserProgress,
)
from services.fitness_service.models.relationship import (  # noqa: F401
    ParentChildRelationship,
)

__all__ = [
    # Enums
    "AchievementMetric",
    "AdventureStatus",
    "DifficultyModifier",
    "RelationshipKind",
    # Identity
    "Profile",
    "ParentChildRelationship",
    "default_privacy_settings",
    # Family-scoped records
    "ExerciseSession",
    "ExerciseProgress",
    "UserAdventure",
    "UserProgress",
    "UserAchievement",
    # Catalog
    "Achievement",
]
