"""Expiring key-value caches backing the volatile artifact store.

Two implementations share the ExpiringCache protocol:
- MemoryCache: in-process map with per-entry expiry (default)
- DiskCacheBackend: diskcache.Cache, shared by all processes on a host

Both provide an atomic add() (set only if absent), which the build
coordination protocol relies on.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Any, Protocol

from diskcache import Cache


class ExpiringCache(Protocol):
    """Minimal cache interface used by the volatile store."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, expire: float | None = None) -> bool: ...

    def add(self, key: str, value: Any, expire: float | None = None) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def transact(self) -> AbstractContextManager[Any]: ...


class MemoryCache:
    """Thread-safe in-process cache with per-entry expiry.

    Expired entries are dropped lazily when they are next touched.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def _live(self, key: str) -> tuple[Any, float | None] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return entry

    def _expires_at(self, expire: float | None) -> float | None:
        return None if expire is None else self._clock() + expire

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._live(key)
            return default if entry is None else entry[0]

    def set(self, key: str, value: Any, expire: float | None = None) -> bool:
        with self._lock:
            self._entries[key] = (value, self._expires_at(expire))
            return True

    def add(self, key: str, value: Any, expire: float | None = None) -> bool:
        """Set key only if it is absent or expired.

        Returns:
            True if the value was stored.
        """
        with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = (value, self._expires_at(expire))
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    @contextmanager
    def transact(self) -> Iterator[None]:
        """Hold the cache lock across several operations."""
        with self._lock:
            yield

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._entries) if self._live(key))


class DiskCacheBackend:
    """ExpiringCache adapter over a diskcache.Cache directory."""

    def __init__(self, directory: Path, timeout: float = 60.0) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        self._cache = Cache(str(directory), timeout=timeout)

    @property
    def directory(self) -> str:
        return str(self._cache.directory)

    def get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default=default)

    def set(self, key: str, value: Any, expire: float | None = None) -> bool:
        return bool(self._cache.set(key, value, expire=expire))

    def add(self, key: str, value: Any, expire: float | None = None) -> bool:
        return bool(self._cache.add(key, value, expire=expire))

    def delete(self, key: str) -> bool:
        return bool(self._cache.delete(key))

    def transact(self) -> AbstractContextManager[Any]:
        return self._cache.transact()

    def close(self) -> None:
        self._cache.close()


__all__ = ["DiskCacheBackend", "ExpiringCache", "MemoryCache"]
