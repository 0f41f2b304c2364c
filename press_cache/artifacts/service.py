"""Artifact service module.

This module provides the high-level artifact API:
- create_store(): choose the storage backend from settings
- compile_artifact(): main entry point - build with cache awareness
- clear_cache(): purge artifacts of one kind
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from press_cache.artifacts.base import ArtifactNotFoundError, ArtifactStore
from press_cache.artifacts.cache_key import derive_key
from press_cache.artifacts.disk import PersistentArtifactStore
from press_cache.artifacts.expiring import DiskCacheBackend, ExpiringCache, MemoryCache
from press_cache.artifacts.memory import (
    GzippedVolatileArtifactStore,
    VolatileArtifactStore,
)
from press_cache.config import get_settings
from press_cache.types import ComponentFileInfo, DeliveryInfo, StorageKind

if TYPE_CHECKING:
    from press_cache.config import Settings
    from press_cache.transform import Transformer

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Outcome of compile_artifact().

    Attributes:
        key: Artifact key derived from the components.
        cache_hit: True if the artifact was already stored or was built by
            a concurrent caller.
        length: Stored size in bytes.
        delivery: Delivery hints from the store, if any.
    """

    key: str
    cache_hit: bool
    length: int
    delivery: DeliveryInfo | None = None


def _create_cache(settings: Settings) -> ExpiringCache:
    if settings.shared_cache_dir is not None:
        logger.debug("Using shared cache at %s", settings.shared_cache_dir)
        return DiskCacheBackend(settings.shared_cache_dir)
    return MemoryCache()


def create_store(settings: Settings | None = None) -> ArtifactStore:
    """Create the artifact store selected by configuration.

    Args:
        settings: Application settings.

    Returns:
        PersistentArtifactStore for disk storage; otherwise a volatile
        store, gzipped if enabled.
    """
    if settings is None:
        settings = get_settings()

    if settings.storage == StorageKind.DISK:
        if settings.gzip:
            logger.debug("gzip precompression is only applied to memory storage")
        return PersistentArtifactStore(
            settings.compressed_dir,
            max_build_time=settings.max_build_time,
            poll_interval=settings.poll_interval,
        )

    store_cls = GzippedVolatileArtifactStore if settings.gzip else VolatileArtifactStore
    return store_cls(
        _create_cache(settings),
        max_build_time=settings.max_build_time,
        poll_interval=settings.poll_interval,
    )


def compile_artifact(
    store: ArtifactStore,
    components: Sequence[ComponentFileInfo],
    transformer: Transformer,
    kind: str | None = None,
    compress: bool = True,
) -> CompileResult:
    """Build an artifact from its components, or reuse the stored one.

    This is the main entry point. It:
    1. Derives the artifact key from the ordered components
    2. Returns the stored artifact if it exists
    3. Otherwise coordinates a build, running the transformer over every
       component in order into the store's sink
    4. If another caller built it meanwhile, reuses that result

    Args:
        store: Artifact store.
        components: Component files in canonical order.
        transformer: Transformer producing each component's content.
        kind: Artifact kind, e.g. "js".
        compress: Passed through to the transformer.

    Returns:
        CompileResult describing the stored artifact.

    Raises:
        BuildTimeoutError: If a concurrent build did not finish in time.
        StorageError: If the artifact could not be stored.
        ArtifactNotFoundError: If a concurrent build ended without
            storing the artifact.
    """
    key = derive_key(components, kind)

    if store.exists(key):
        logger.debug("Cache hit for %s", key)
        return _result(store, key, cache_hit=True)

    with store.building(key) as sink:
        if sink is not None:
            logger.info("Compiling %d component(s) into %s", len(components), key)
            for component in components:
                transformer.transform(Path(component.path), sink, compress)

    if sink is None:
        if not store.exists(key):
            raise ArtifactNotFoundError(key)
        return _result(store, key, cache_hit=True)

    return _result(store, key, cache_hit=False)


def _result(store: ArtifactStore, key: str, cache_hit: bool) -> CompileResult:
    return CompileResult(
        key=key,
        cache_hit=cache_hit,
        length=store.length(key),
        delivery=store.describe_for_delivery(key),
    )


def clear_cache(store: ArtifactStore, kind: str | None = None) -> int:
    """Remove all stored artifacts of a kind.

    Args:
        store: Artifact store.
        kind: Artifact kind, or None for every artifact.

    Returns:
        Number of artifacts removed.
    """
    return store.clear(kind)


__all__ = [
    "CompileResult",
    "clear_cache",
    "compile_artifact",
    "create_store",
]
