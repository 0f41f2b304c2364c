"""Shared fixtures for artifact store tests."""

import pytest

from press_cache.artifacts.disk import PersistentArtifactStore
from press_cache.artifacts.memory import (
    GzippedVolatileArtifactStore,
    VolatileArtifactStore,
)

# Short timings keep coordination tests fast
MAX_BUILD_TIME = 0.5
POLL_INTERVAL = 0.01


@pytest.fixture(params=["memory", "gzip", "disk"])
def store(request, tmp_path):
    """Each artifact store backend with short coordination timings."""
    if request.param == "disk":
        return PersistentArtifactStore(
            tmp_path / "compressed",
            max_build_time=MAX_BUILD_TIME,
            poll_interval=POLL_INTERVAL,
        )
    store_cls = (
        GzippedVolatileArtifactStore if request.param == "gzip" else VolatileArtifactStore
    )
    return store_cls(max_build_time=MAX_BUILD_TIME, poll_interval=POLL_INTERVAL)

