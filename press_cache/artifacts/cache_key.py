"""Cache key computation for compiled artifacts.

This module handles:
- Canonical serialization of component file identities
- Deterministic hash computation over ordered components
- Artifact kind (extension) normalization

Component order is significant: callers must supply components in a
reproducible order. Components are neither sorted nor deduplicated.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

from press_cache.types import ComponentFileInfo

# Schema version for cache key format; bump when cache key format changes
CACHE_KEY_SCHEMA_VERSION = "1"


def normalize_kind(kind: str | None) -> str:
    """Normalize an artifact kind to a dotted extension.

    Args:
        kind: Kind such as "js", ".js" or None.

    Returns:
        Extension with a leading dot, or "" for no kind.
    """
    if not kind:
        return ""
    kind = kind.strip().lower()
    if "/" in kind or "\\" in kind:
        raise ValueError(f"Invalid artifact kind: {kind!r}")
    return kind if kind.startswith(".") else f".{kind}"


def canonical_components(components: Iterable[ComponentFileInfo]) -> list[list[Any]]:
    """Create the ordered payload hashed into the cache key.

    Args:
        components: Component file infos in caller-defined order.

    Returns:
        List of [path, last_modified] pairs in the given order.

    Raises:
        TypeError: If an item is not a ComponentFileInfo.
    """
    payload: list[list[Any]] = []
    for component in components:
        if not isinstance(component, ComponentFileInfo):
            raise TypeError(
                f"Expected ComponentFileInfo, got {type(component).__name__}"
            )
        payload.append([component.path, int(component.last_modified)])
    return payload


def derive_key(
    components: Iterable[ComponentFileInfo],
    kind: str | None = None,
) -> str:
    """Compute the artifact key for an ordered list of components.

    The key is the SHA-256 hash of the canonical JSON representation of
    the components, followed by the kind's extension.

    Args:
        components: Component file infos in caller-defined order.
        kind: Optional artifact kind, e.g. "js" or "css".

    Returns:
        Artifact key such as "3f2a...e9.js".
    """
    canonical_json = json.dumps(
        {"v": CACHE_KEY_SCHEMA_VERSION, "components": canonical_components(components)},
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
    return f"{digest}{normalize_kind(kind)}"


def key_matches_kind(key: str, kind: str | None) -> bool:
    """Check whether a key belongs to an artifact kind.

    Args:
        key: Artifact key.
        kind: Artifact kind, or None to match every key.

    Returns:
        True if the key carries the kind's extension.
    """
    extension = normalize_kind(kind)
    return not extension or key.lower().endswith(extension)


__all__ = [
    "CACHE_KEY_SCHEMA_VERSION",
    "canonical_components",
    "derive_key",
    "key_matches_kind",
    "normalize_kind",
]
