"""Fitness service routers."""

from services.fitness_service.routers.achievements import (
    router as achievements_router,
)
from services.fitness_service.routers.family import router as family_router
from services.fitness_service.routers.internal import router as internal_router
from services.fitness_service.routers.profiles import router as profiles_router
from services.fitness_service.routers.progress import router as progress_router

__all__ = [
    "achievements_router",
    "family_router",
    "internal_router",
    "profiles_router",
    "progress_router",
]
