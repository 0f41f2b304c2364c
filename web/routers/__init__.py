"""Router modules for FastAPI web API."""

from web.routers import artifacts, config, health

__all__ = ["artifacts", "config", "health"]
