"""FastAPI application factory and main app.

This module creates the FastAPI application with all routers and
the artifact store configured.

Web routes are thin proxies to core APIs.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from press_cache import __version__
from press_cache.artifacts.service import create_store
from web.routers import artifacts, config, health


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Creates the artifact store once on startup.
    """
    app.state.store = create_store()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    application = FastAPI(
        title="Press Cache API",
        description="HTTP API for serving and clearing cached compressed assets",
        version=__version__,
        lifespan=lifespan,
    )

    # Include routers
    application.include_router(health.router, tags=["health"])
    application.include_router(config.router, prefix="/config", tags=["config"])
    application.include_router(
        artifacts.router, prefix="/artifacts", tags=["artifacts"]
    )

    return application


# Create the default application instance
app = create_app()
