"""Configuration endpoints."""

from typing import Any

from fastapi import APIRouter

from press_cache.config import get_settings

router = APIRouter()


@router.get("")
def get_config() -> dict[str, Any]:
    """Get effective configuration.

    Returns:
        Current configuration as JSON.
    """
    settings = get_settings()
    return {
        "storage": settings.storage.value,
        "gzip": settings.gzip,
        "compressed_dir": str(settings.compressed_dir),
        "shared_cache_dir": (
            str(settings.shared_cache_dir) if settings.shared_cache_dir else None
        ),
        "max_build_time_ms": settings.max_build_time_ms,
        "poll_interval_ms": settings.poll_interval_ms,
        "log_level": settings.log_level,
    }
