"""Configuration settings for press_cache.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from press_cache.types import StorageKind


def _default_compressed_dir() -> Path:
    """Return the default directory for on-disk artifacts."""
    return Path.home() / ".cache" / "press-cache" / "compressed"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the PRESS_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage: StorageKind = Field(
        default=StorageKind.MEMORY,
        description="Artifact storage backend (memory or disk)",
    )
    gzip: bool = Field(
        default=True,
        description="Store gzip-compressed bytes (memory storage only)",
    )
    compressed_dir: Path = Field(
        default_factory=_default_compressed_dir,
        description="Directory for on-disk artifacts",
    )
    shared_cache_dir: Path | None = Field(
        default=None,
        description="Directory of a diskcache shared between processes "
        "(uses an in-process cache if not set)",
    )

    # Build coordination (in milliseconds)
    max_build_time_ms: int = Field(
        default=60_000,
        ge=1,
        description="Maximum time a waiter blocks for an in-flight build",
    )
    poll_interval_ms: int = Field(
        default=1_000,
        ge=1,
        description="Interval between checks for an in-flight build",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def max_build_time(self) -> float:
        """Maximum build time in seconds."""
        return self.max_build_time_ms / 1000

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
