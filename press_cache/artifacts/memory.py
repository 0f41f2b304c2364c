"""Volatile artifact storage in an expiring cache.

Artifacts are stored as bytes under "file-<key>" with a very long
expiration, build markers under "in-progress-<key>" holding the
builder's owner token with an expiration of max_build_time, and the set
of stored keys under "artifact-index" so that clear() can find them
without listing the cache.
"""

from __future__ import annotations

import gzip
import io
import logging
import zlib
from typing import BinaryIO, TextIO

from press_cache.artifacts.base import (
    DEFAULT_MAX_BUILD_TIME,
    DEFAULT_POLL_INTERVAL,
    ArtifactNotFoundError,
    ArtifactStore,
    StorageError,
)
from press_cache.artifacts.cache_key import key_matches_kind, normalize_kind
from press_cache.artifacts.expiring import ExpiringCache, MemoryCache
from press_cache.types import DeliveryInfo

logger = logging.getLogger(__name__)

ARTIFACT_INDEX_KEY = "artifact-index"
A_VERY_LONG_TIME = 30 * 24 * 60 * 60  # 30 days, in seconds


def artifact_cache_key(key: str) -> str:
    """Return the cache key under which an artifact's bytes are stored."""
    return f"file-{key}"


def marker_cache_key(key: str) -> str:
    """Return the cache key of an artifact's build marker."""
    return f"in-progress-{key}"


class VolatileArtifactStore(ArtifactStore):
    """Artifact store backed by an expiring key-value cache."""

    def __init__(
        self,
        cache: ExpiringCache | None = None,
        max_build_time: float = DEFAULT_MAX_BUILD_TIME,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__(max_build_time=max_build_time, poll_interval=poll_interval)
        self.cache: ExpiringCache = cache if cache is not None else MemoryCache()

    def _get(self, key: str) -> bytes | None:
        data: bytes | None = self.cache.get(artifact_cache_key(key))
        return data

    def _require(self, key: str) -> bytes:
        data = self._get(key)
        if data is None:
            raise ArtifactNotFoundError(key)
        return data

    def exists(self, key: str) -> bool:
        return self._get(key) is not None

    def open(self, key: str) -> BinaryIO:
        return io.BytesIO(self._require(key))

    def length(self, key: str) -> int:
        return len(self._require(key))

    def stored_keys(self) -> set[str]:
        """Return the keys recorded in the artifact index."""
        return set(self.cache.get(ARTIFACT_INDEX_KEY) or ())

    def clear(self, kind: str | None = None) -> int:
        extension = normalize_kind(kind)
        removed = 0
        with self.cache.transact():
            index = self.stored_keys()
            matching = {key for key in index if key_matches_kind(key, extension)}
            for key in matching:
                if self.cache.delete(artifact_cache_key(key)):
                    removed += 1
            remaining = index - matching
            if remaining:
                self.cache.set(ARTIFACT_INDEX_KEY, remaining, expire=A_VERY_LONG_TIME)
            else:
                self.cache.delete(ARTIFACT_INDEX_KEY)

        logger.info("Cleared %d %s artifact(s) from cache", removed, kind or "cached")
        return removed

    def _try_mark(self, key: str, token: str) -> bool:
        return self.cache.add(marker_cache_key(key), token, expire=self.max_build_time)

    def _marker_present(self, key: str) -> bool:
        return self.cache.get(marker_cache_key(key)) is not None

    def _release_marker(self, key: str, token: str) -> bool:
        marker = marker_cache_key(key)
        with self.cache.transact():
            if self.cache.get(marker) != token:
                return False
            self.cache.delete(marker)
        return True

    def _new_sink(self, key: str) -> TextIO:
        return io.TextIOWrapper(io.BytesIO(), encoding="utf-8", newline="")

    def _encode(self, key: str, data: bytes) -> bytes:
        """Transform written bytes into their stored form."""
        return data

    def _commit(self, key: str, sink: TextIO) -> int:
        sink.flush()
        raw: bytes = sink.buffer.getvalue()  # type: ignore[attr-defined]
        sink.close()

        data = self._encode(key, raw)
        logger.debug("Saving artifact %s of size %d bytes to cache", key, len(data))
        self._store(key, data)
        return len(data)

    def _store(self, key: str, data: bytes) -> None:
        if not self.cache.set(artifact_cache_key(key), data, expire=A_VERY_LONG_TIME):
            raise StorageError(
                f"Underlying cache could not store artifact {key}", key=key
            )

        with self.cache.transact():
            index = self.stored_keys()
            index.add(key)
            self.cache.set(ARTIFACT_INDEX_KEY, index, expire=A_VERY_LONG_TIME)

    def _discard(self, key: str, sink: TextIO) -> None:
        sink.close()


class GzippedVolatileArtifactStore(VolatileArtifactStore):
    """Volatile store that keeps artifacts gzip-compressed.

    Reads return the compressed bytes; describe_for_delivery() tells the
    consumer to serve them with a gzip content encoding.
    """

    content_encoding = "gzip"

    def _encode(self, key: str, data: bytes) -> bytes:
        try:
            # mtime=0 keeps the output identical for identical input
            return gzip.compress(data, mtime=0)
        except (OSError, zlib.error) as e:
            raise StorageError(
                f"Could not gzip artifact {key}: {e}", key=key, code="encoding_failed"
            ) from e

    def describe_for_delivery(self, key: str) -> DeliveryInfo | None:
        return DeliveryInfo(
            content_encoding=self.content_encoding,
            content_length=self.length(key),
        )


__all__ = [
    "ARTIFACT_INDEX_KEY",
    "A_VERY_LONG_TIME",
    "GzippedVolatileArtifactStore",
    "VolatileArtifactStore",
    "artifact_cache_key",
    "marker_cache_key",
]
