"""Artifact delivery endpoints.

- GET /artifacts/{key} - Serve a stored artifact with delivery headers
- GET /artifacts/{key}/info - Describe a stored artifact
- DELETE /artifacts - Clear artifacts of a kind
"""

import mimetypes
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi import status as http_status

from press_cache.artifacts.base import ArtifactNotFoundError, ArtifactStore
from press_cache.artifacts.service import clear_cache
from web.deps import get_store

router = APIRouter()


def _not_found(e: ArtifactNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_404_NOT_FOUND,
        detail={"code": e.code, "message": str(e)},
    )


def _invalid_key(key: str) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        detail={"code": "invalid_key", "message": f"Invalid artifact key: {key}"},
    )


@router.get("/{key}")
def get_artifact(
    key: str,
    store: ArtifactStore = Depends(get_store),
) -> Response:
    """Serve a stored artifact.

    Args:
        key: Artifact key.
        store: Artifact store.

    Returns:
        The stored bytes, with Content-Encoding/Content-Length hints from
        the store when it provides them.
    """
    try:
        data = store.read_bytes(key)
        delivery = store.describe_for_delivery(key)
    except ArtifactNotFoundError as e:
        raise _not_found(e) from None
    except ValueError:
        raise _invalid_key(key) from None

    media_type, _ = mimetypes.guess_type(key)
    headers = delivery.headers() if delivery else {}
    return Response(
        content=data,
        media_type=media_type or "application/octet-stream",
        headers=headers,
    )


@router.get("/{key}/info")
def get_artifact_info(
    key: str,
    store: ArtifactStore = Depends(get_store),
) -> dict[str, Any]:
    """Describe a stored artifact.

    Args:
        key: Artifact key.
        store: Artifact store.

    Returns:
        Key, stored length and delivery headers.
    """
    try:
        length = store.length(key)
        delivery = store.describe_for_delivery(key)
    except ArtifactNotFoundError as e:
        raise _not_found(e) from None
    except ValueError:
        raise _invalid_key(key) from None

    return {
        "key": key,
        "length": length,
        "headers": delivery.headers() if delivery else {},
    }


@router.delete("")
def clear_artifacts(
    kind: str | None = Query(None, description="Artifact kind, e.g. js"),
    store: ArtifactStore = Depends(get_store),
) -> dict[str, Any]:
    """Clear stored artifacts of a kind.

    Args:
        kind: Artifact kind; all artifacts if omitted.
        store: Artifact store.

    Returns:
        Kind and number of artifacts removed.
    """
    try:
        removed = clear_cache(store, kind)
    except ValueError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_kind", "message": str(e)},
        ) from None
    return {"kind": kind, "removed": removed}
