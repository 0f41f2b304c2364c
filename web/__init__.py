"""FastAPI web application for Press Cache.

This module provides the HTTP delivery surface for cached artifacts.

All business logic is delegated to core modules in press_cache/.
"""

from web.app import app, create_app

__all__ = ["app", "create_app"]
