"""Liveness and service description endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from press_cache import __version__
from press_cache.artifacts.base import ArtifactStore
from web.deps import get_store

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Report that the API is up.

    Returns:
        Status and package version.
    """
    return {"status": "ok", "version": __version__}


@router.get("/")
def root(store: ArtifactStore = Depends(get_store)) -> dict[str, Any]:
    """Describe the service and the artifact store it serves from.

    Returns:
        API name, version, active store backend and artifact routes.
    """
    return {
        "name": "Press Cache API",
        "version": __version__,
        "store": type(store).__name__,
        "delivery_encoding": getattr(store, "content_encoding", None),
        "routes": {
            "artifact": "/artifacts/{key}",
            "artifact_info": "/artifacts/{key}/info",
            "clear": "/artifacts?kind={kind}",
        },
    }
