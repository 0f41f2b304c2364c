"""Artifact store abstraction and build coordination.

This module handles:
- The storage contract shared by all backends (exists/open/length/clear)
- The write path, which coordinates builders per artifact key
- The error taxonomy surfaced to callers

Build coordination works the same way for every backend. The first
caller of begin_write() for a key atomically sets a build marker holding
a fresh owner token and receives a sink. Later callers poll until the
marker disappears, then receive None and read the finished artifact
instead. Markers expire after max_build_time, so a builder that dies
without cleanup cannot block a key forever. Only the holder of the token
may remove a marker: a builder that outlives its marker leaves the
marker of the builder after it in place.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import BinaryIO, TextIO

from press_cache.types import DeliveryInfo

logger = logging.getLogger(__name__)

DEFAULT_MAX_BUILD_TIME = 60.0
DEFAULT_POLL_INTERVAL = 1.0


class ArtifactStoreError(Exception):
    """Base error for artifact store operations."""

    def __init__(self, message: str, code: str = "artifact_store_error") -> None:
        super().__init__(message)
        self.code = code


class ArtifactNotFoundError(ArtifactStoreError):
    """Raised when an artifact is read but not stored."""

    def __init__(self, key: str, code: str = "artifact_not_found") -> None:
        super().__init__(f"Artifact not found: {key}", code=code)
        self.key = key


class BuildTimeoutError(ArtifactStoreError):
    """Raised when an in-flight build does not finish in time."""

    def __init__(self, key: str, waited: float, code: str = "build_timeout") -> None:
        super().__init__(
            f"Timeout after {waited:.1f}s waiting for artifact to be built: {key}",
            code=code,
        )
        self.key = key
        self.waited = waited


class StorageError(ArtifactStoreError):
    """Raised when an artifact cannot be encoded or stored."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        code: str = "storage_failed",
    ) -> None:
        super().__init__(message, code=code)
        self.key = key


class ArtifactStore(ABC):
    """Storage for compiled artifacts, keyed by artifact key.

    Subclasses implement storage and the marker primitives; this class
    implements the build coordination protocol on top of them.

    Attributes:
        max_build_time: Marker lifetime and maximum wait, in seconds.
        poll_interval: Delay between marker checks while waiting, in seconds.
    """

    def __init__(
        self,
        max_build_time: float = DEFAULT_MAX_BUILD_TIME,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_build_time <= 0:
            raise ValueError("max_build_time must be positive")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.max_build_time = max_build_time
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        # id(sink) -> (sink, key, owner token)
        self._pending: dict[int, tuple[TextIO, str, str]] = {}
        self._pending_lock = threading.Lock()

    # Reading

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an artifact is stored for key."""

    @abstractmethod
    def open(self, key: str) -> BinaryIO:
        """Open the stored artifact for reading.

        Raises:
            ArtifactNotFoundError: If no artifact is stored for key.
        """

    @abstractmethod
    def length(self, key: str) -> int:
        """Return the stored artifact's size in bytes.

        Raises:
            ArtifactNotFoundError: If no artifact is stored for key.
        """

    def read_bytes(self, key: str) -> bytes:
        """Return the stored artifact's bytes."""
        with self.open(key) as stream:
            return stream.read()

    def describe_for_delivery(self, key: str) -> DeliveryInfo | None:
        """Return delivery hints for a stored artifact, if any."""
        return None

    @abstractmethod
    def clear(self, kind: str | None = None) -> int:
        """Remove every stored artifact of a kind.

        Args:
            kind: Artifact kind such as "js"; None removes all artifacts.

        Returns:
            Number of artifacts removed.
        """

    # Backend primitives

    @abstractmethod
    def _try_mark(self, key: str, token: str) -> bool:
        """Atomically set the build marker for key to token if it is not set."""

    @abstractmethod
    def _marker_present(self, key: str) -> bool:
        """Check whether a live build marker exists for key."""

    @abstractmethod
    def _release_marker(self, key: str, token: str) -> bool:
        """Remove the build marker for key if it still holds token.

        Returns:
            True if the marker was removed.
        """

    @abstractmethod
    def _new_sink(self, key: str) -> TextIO:
        """Create a fresh writable sink for a build of key."""

    @abstractmethod
    def _commit(self, key: str, sink: TextIO) -> int:
        """Finalize sink's contents as the artifact for key.

        Returns:
            Size of the stored artifact in bytes.
        """

    @abstractmethod
    def _discard(self, key: str, sink: TextIO) -> None:
        """Drop sink's contents without storing them."""

    # Writing

    def begin_write(self, key: str) -> TextIO | None:
        """Start building the artifact for key.

        Returns:
            A writable sink if this caller is the sole builder, or None if
            another builder finished while this caller waited.

        Raises:
            BuildTimeoutError: If another build is still in progress after
                max_build_time.
        """
        token = uuid.uuid4().hex
        if self._try_mark(key, token):
            logger.debug("Acquired build marker for %s", key)
            try:
                sink = self._new_sink(key)
            except Exception:
                self._release_marker(key, token)
                raise
            with self._pending_lock:
                self._pending[id(sink)] = (sink, key, token)
            return sink

        self._wait_for_build(key)
        return None

    def _wait_for_build(self, key: str) -> None:
        start = self._clock()
        while self._marker_present(key):
            waited = self._clock() - start
            if waited > self.max_build_time:
                raise BuildTimeoutError(key, waited)
            logger.debug("Waiting for artifact to be built: %s", key)
            self._sleep(self.poll_interval)
        logger.debug("Build of %s finished elsewhere", key)

    def _take_pending(self, key: str, sink: TextIO) -> str:
        """Remove sink's pending build and return its owner token.

        A sink that was not handed out by begin_write() for key is
        discarded before StorageError is raised.
        """
        with self._pending_lock:
            entry = self._pending.get(id(sink))
            if entry is not None and entry[0] is sink and entry[1] == key:
                del self._pending[id(sink)]
                return entry[2]
        self._discard(key, sink)
        raise StorageError(f"No build in progress for sink of {key}", key=key)

    def _release(self, key: str, token: str) -> None:
        if not self._release_marker(key, token):
            logger.warning(
                "Build of %s outlived its marker; leaving the current marker in place",
                key,
            )

    def finish_write(self, key: str, sink: TextIO) -> None:
        """Store the sink's contents and release the build marker.

        Raises:
            StorageError: If the artifact could not be encoded or stored,
                or if sink is not a pending build of key.
        """
        token = self._take_pending(key, sink)
        start = self._clock()
        try:
            size = self._commit(key, sink)
        except ArtifactStoreError:
            raise
        except UnicodeError as e:
            raise StorageError(
                f"Could not encode artifact {key}: {e}", key=key, code="encoding_failed"
            ) from e
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not store artifact {key}: {e}", key=key) from e
        finally:
            self._release(key, token)
        logger.info(
            "Stored artifact %s (%d bytes) in %.0f ms",
            key,
            size,
            (self._clock() - start) * 1000,
        )

    def abort_write(self, key: str, sink: TextIO) -> None:
        """Discard a failed build and release the build marker."""
        token = self._take_pending(key, sink)
        try:
            self._discard(key, sink)
        finally:
            self._release(key, token)
        logger.debug("Aborted build of %s", key)

    @contextmanager
    def building(self, key: str) -> Iterator[TextIO | None]:
        """Coordinate a build of key as a context manager.

        Yields the sink from begin_write(). On normal exit the artifact is
        committed; on error the build is aborted and the error re-raised.
        """
        sink = self.begin_write(key)
        if sink is None:
            yield None
            return
        try:
            yield sink
        except BaseException:
            self.abort_write(key, sink)
            raise
        self.finish_write(key, sink)


__all__ = [
    "DEFAULT_MAX_BUILD_TIME",
    "DEFAULT_POLL_INTERVAL",
    "ArtifactNotFoundError",
    "ArtifactStore",
    "ArtifactStoreError",
    "BuildTimeoutError",
    "StorageError",
]
