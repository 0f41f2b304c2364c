"""Tests for artifacts/expiring.py module."""

import pytest

from press_cache.artifacts.expiring import DiskCacheBackend, MemoryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestMemoryCache:
    """Tests for MemoryCache."""

    def test_set_and_get(self):
        """Stored values should be returned."""
        cache = MemoryCache()
        assert cache.set("a", b"1")
        assert cache.get("a") == b"1"
        assert cache.get("missing") is None
        assert cache.get("missing", "default") == "default"

    def test_add_only_if_absent(self):
        """add() should not overwrite a live entry."""
        cache = MemoryCache()
        assert cache.add("marker", True)
        assert not cache.add("marker", True)
        cache.delete("marker")
        assert cache.add("marker", True)

    def test_entries_expire(self):
        """Entries should disappear after their expiry."""
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("a", 1, expire=5)
        clock.now += 4.9
        assert cache.get("a") == 1
        clock.now += 0.2
        assert cache.get("a") is None
        assert "a" not in cache

    def test_add_replaces_expired_entry(self):
        """add() should succeed once the previous entry expired."""
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        assert cache.add("marker", True, expire=1)
        clock.now += 2
        assert cache.add("marker", True, expire=1)

    def test_delete_reports_presence(self):
        """delete() should report whether an entry existed."""
        cache = MemoryCache()
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False

    def test_transact_is_reentrant(self):
        """Operations should work inside transact()."""
        cache = MemoryCache()
        with cache.transact():
            cache.set("a", 1)
            assert cache.get("a") == 1
        assert len(cache) == 1


class TestDiskCacheBackend:
    """Tests for DiskCacheBackend."""

    @pytest.fixture
    def backend(self, tmp_path):
        backend = DiskCacheBackend(tmp_path / "shared")
        yield backend
        backend.close()

    def test_set_get_delete(self, backend):
        """Basic operations should round-trip through diskcache."""
        assert backend.set("a", b"payload")
        assert backend.get("a") == b"payload"
        assert backend.delete("a")
        assert backend.get("a") is None

    def test_add_only_if_absent(self, backend):
        """add() should be a conditional set."""
        assert backend.add("marker", True, expire=60)
        assert not backend.add("marker", True, expire=60)

    def test_transact(self, backend):
        """transact() should allow grouped updates."""
        with backend.transact():
            backend.set("index", {"a.js"})
        assert backend.get("index") == {"a.js"}

    def test_shared_between_instances(self, tmp_path):
        """Two handles on one directory should see the same entries."""
        first = DiskCacheBackend(tmp_path / "shared")
        second = DiskCacheBackend(tmp_path / "shared")
        try:
            first.set("a", 1)
            assert second.get("a") == 1
            assert not second.add("a", 2)
        finally:
            first.close()
            second.close()
