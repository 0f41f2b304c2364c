"""Artifact store dependency for FastAPI.

Provides the process-wide artifact store to route handlers via FastAPI
dependency injection. The store is created once at startup (see
web.app.lifespan), so the backend is selected once per process.
"""

from __future__ import annotations

from fastapi import Request

from press_cache.artifacts.base import ArtifactStore


def get_store(request: Request) -> ArtifactStore:
    """Get the artifact store from app state.

    Args:
        request: FastAPI request object.

    Returns:
        Artifact store shared by all requests.
    """
    store: ArtifactStore = request.app.state.store
    return store
