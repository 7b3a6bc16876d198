"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from calorie_planner.api.ai import router as ai_router
from calorie_planner.api.chat import router as chat_router
from calorie_planner.api.library import router as library_router
from calorie_planner.api.planning import router as planning_router
from calorie_planner.api.professional import router as professional_router
from calorie_planner.api.profiles import router as profiles_router
from calorie_planner.api.webhooks import router as webhooks_router
from calorie_planner.app_logging import configure_logging
from calorie_planner.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting calorie planner (%s, timezone %s)",
            container.settings.environment,
            container.settings.plan_timezone,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(library_router)
    app.include_router(ai_router)
    app.include_router(profiles_router)
    app.include_router(professional_router)
    app.include_router(chat_router)
    app.include_router(webhooks_router)
    app.include_router(planning_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
