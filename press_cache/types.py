"""Shared type definitions for press_cache.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class StorageKind(str, Enum):
    """Where compiled artifacts are kept."""

    MEMORY = "memory"
    DISK = "disk"


@dataclass(frozen=True)
class ComponentFileInfo:
    """Identity and modification state of one component file.

    Attributes:
        path: Path identity of the source file.
        last_modified: Modification time in milliseconds since the epoch.
    """

    path: str
    last_modified: int


@dataclass(frozen=True)
class DeliveryInfo:
    """Hints for serving a stored artifact."""

    content_encoding: str | None
    content_length: int

    def headers(self) -> dict[str, str]:
        """Render the hints as HTTP response headers."""
        headers = {"Content-Length": str(self.content_length)}
        if self.content_encoding:
            headers["Content-Encoding"] = self.content_encoding
        return headers


def component_info(path: Path | str) -> ComponentFileInfo:
    """Build a ComponentFileInfo from a file on disk.

    Args:
        path: Path to an existing file.

    Returns:
        ComponentFileInfo with the file's mtime in milliseconds.
    """
    path = Path(path)
    return ComponentFileInfo(
        path=str(path),
        last_modified=path.stat().st_mtime_ns // 1_000_000,
    )


__all__ = [
    "ComponentFileInfo",
    "DeliveryInfo",
    "StorageKind",
    "component_info",
]
