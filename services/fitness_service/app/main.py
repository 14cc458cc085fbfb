"""FastAPI application for the Fitness Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.fitness_service.routers import (
    achievements_router,
    family_router,
    internal_router,
    profiles_router,
    progress_router,
)


def create_app() -> FastAPI:
    """Create and configure the Fitness Service FastAPI app."""
    app = FastAPI(
        title="Family Fitness Service",
        version="0.1.0",
        description="Profiles, family links, activity progress and achievements.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "fitness"}

    app.include_router(profiles_router)
    app.include_router(family_router)
    app.include_router(progress_router)
    app.include_router(achievements_router)

    # Internal service-to-service routes (not proxied by gateway)
    app.include_router(internal_router)

    return app


app = create_app()
