"""Fitness Service schemas package.

Re-exports all schemas so routers import from one place.
When adding a new schema, add its import and __all__ entry.
"""

from services.fitness_service.schemas.family import (  # noqa: F401
    AccountClosedResponse,
    AdminLinkRequest,
    ChildOnboardRequest,
    ChildOnboardResponse,
    RelationshipResponse,
)
from services.fitness_service.schemas.profile import (  # noqa: F401
    PrivacySettings,
    PrivacySettingsPatch,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
)
from services.fitness_service.schemas.progress import (  # noqa: F401
    AchievementResponse,
    ActivityRecordedResponse,
    AdventureProgressResponse,
    EarnedAchievementResponse,
    ProgressResponse,
    SessionCreate,
    SessionResponse,
)

__all__ = [
    # Profiles
    "PrivacySettings",
    "PrivacySettingsPatch",
    "ProfileCreate",
    "ProfileResponse",
    "ProfileUpdate",
    # Family
    "AccountClosedResponse",
    "AdminLinkRequest",
    "ChildOnboardRequest",
    "ChildOnboardResponse",
    "RelationshipResponse",
    # Progress
    "AchievementResponse",
    "ActivityRecordedResponse",
    "AdventureProgressResponse",
    "EarnedAchievementResponse",
    "ProgressResponse",
    "SessionCreate",
    "SessionResponse",
]
