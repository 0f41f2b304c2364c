"""Persistent artifact storage in a directory.

This module handles:
- Storing each artifact as a file named by its key
- Lock files as build markers, created with O_EXCL and holding the
  owner token of the build
- Atomic publication of finished artifacts via rename
- Clearing artifacts by extension

Builds write to a hidden temporary file next to the final path and are
renamed into place on commit, so readers only ever see complete files.
"""

from __future__ import annotations

import contextlib
import logging
import os
import time
import uuid
from pathlib import Path
from typing import BinaryIO, TextIO

from press_cache.artifacts.base import (
    DEFAULT_MAX_BUILD_TIME,
    DEFAULT_POLL_INTERVAL,
    ArtifactNotFoundError,
    ArtifactStore,
)
from press_cache.artifacts.cache_key import key_matches_kind, normalize_kind

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"
TEMP_SUFFIX = ".tmp"


class PersistentArtifactStore(ArtifactStore):
    """Artifact store keeping one file per artifact under a directory."""

    def __init__(
        self,
        directory: Path,
        max_build_time: float = DEFAULT_MAX_BUILD_TIME,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__(max_build_time=max_build_time, poll_interval=poll_interval)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file path of an artifact.

        Raises:
            ValueError: If the key cannot be used as a file name.
        """
        if not key or key.startswith(".") or "/" in key or "\\" in key:
            raise ValueError(f"Invalid artifact key: {key!r}")
        return self.directory / key

    def _marker_path(self, key: str) -> Path:
        return self.path_for(key).with_name(f"{key}{LOCK_SUFFIX}")

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def open(self, key: str) -> BinaryIO:
        try:
            return self.path_for(key).open("rb")
        except FileNotFoundError:
            raise ArtifactNotFoundError(key) from None

    def length(self, key: str) -> int:
        try:
            return self.path_for(key).stat().st_size
        except FileNotFoundError:
            raise ArtifactNotFoundError(key) from None

    def clear(self, kind: str | None = None) -> int:
        extension = normalize_kind(kind)
        if not self.directory.is_dir():
            return 0

        removed = 0
        for path in sorted(self.directory.iterdir()):
            name = path.name
            if name.startswith(".") or name.endswith(LOCK_SUFFIX):
                continue
            if not path.is_file() or not key_matches_kind(name, extension):
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            removed += 1
            logger.debug("Deleted artifact file %s", path)

        logger.info(
            "Cleared %d %s artifact(s) from %s", removed, kind or "cached", self.directory
        )
        return removed

    def _marker_age(self, marker: Path) -> float | None:
        try:
            return time.time() - marker.stat().st_mtime
        except FileNotFoundError:
            return None

    def _read_token(self, marker: Path) -> str | None:
        try:
            return marker.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None

    def _unlink_if_owned(self, marker: Path, token: str | None) -> bool:
        if token is None or self._read_token(marker) != token:
            return False
        marker.unlink(missing_ok=True)
        return True

    def _try_mark(self, key: str, token: str) -> bool:
        marker = self._marker_path(key)
        # Second attempt only happens after removing a stale marker
        for _ in range(2):
            try:
                fd = os.open(str(marker), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            except FileExistsError:
                age = self._marker_age(marker)
                if age is not None and age > self.max_build_time:
                    # Another process may replace the stale marker first
                    stale_token = self._read_token(marker)
                    logger.warning(
                        "Removing stale build marker for %s (%.0fs old)", key, age
                    )
                    self._unlink_if_owned(marker, stale_token)
                    continue
                return False
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(f"{token}\n")
            return True
        return False

    def _marker_present(self, key: str) -> bool:
        age = self._marker_age(self._marker_path(key))
        return age is not None and age <= self.max_build_time

    def _release_marker(self, key: str, token: str) -> bool:
        return self._unlink_if_owned(self._marker_path(key), token)

    def _new_sink(self, key: str) -> TextIO:
        temp_path = self.directory / f".{key}.{uuid.uuid4().hex[:8]}{TEMP_SUFFIX}"
        return temp_path.open("x", encoding="utf-8", newline="")

    def _commit(self, key: str, sink: TextIO) -> int:
        temp_path = Path(sink.name)
        try:
            sink.flush()
            os.fsync(sink.fileno())
            sink.close()
            os.replace(temp_path, self.path_for(key))
        except (OSError, ValueError):
            self._discard(key, sink)
            raise
        return self.path_for(key).stat().st_size

    def _discard(self, key: str, sink: TextIO) -> None:
        with contextlib.suppress(OSError, ValueError):
            sink.close()
        Path(sink.name).unlink(missing_ok=True)


__all__ = ["LOCK_SUFFIX", "TEMP_SUFFIX", "PersistentArtifactStore"]
