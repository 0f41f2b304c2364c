"""Artifact caching module.

This module handles:
- Cache key derivation from component files
- Volatile, gzipped and persistent artifact stores
- Per-key build coordination
- Cache clearing by artifact kind
"""

from press_cache.artifacts.base import (
    ArtifactNotFoundError,
    ArtifactStore,
    ArtifactStoreError,
    BuildTimeoutError,
    StorageError,
)
from press_cache.artifacts.cache_key import derive_key

__all__ = [
    "ArtifactNotFoundError",
    "ArtifactStore",
    "ArtifactStoreError",
    "BuildTimeoutError",
    "StorageError",
    "derive_key",
]

# Backends and the service live in submodules:
# press_cache.artifacts.memory, .disk, .service
