from __future__ import annotations

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from manifest_index.core.config import IndexSettings
from manifest_index.core.dependencies import get_settings
from manifest_index.core.errors import (
    DriverUnavailableError,
    IndexWriteError,
    ManifestIndexError,
    QueryError,
    StoreUnavailableError,
)
from manifest_index.data.buckets import rebuild_index
from manifest_index.domain.models import (
    DEFAULT_SEARCH_COLUMNS,
    IndexRecord,
    RebuildSummary,
)
from manifest_index.storage import query

logger = logging.getLogger(__name__)
router = APIRouter()


def _http_error(e: ManifestIndexError) -> HTTPException:
    if isinstance(e, QueryError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, (StoreUnavailableError, DriverUnavailableError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if isinstance(e, IndexWriteError):
        logger.error(f"Index write failed: {e}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


# ---------------------------------------------------------------------------
# 1. GET /search
# ---------------------------------------------------------------------------

@router.get("/search", response_model=List[IndexRecord])
def search_apps(
    q: str = Query(default="", description="Substring to look for. Empty matches every app."),
    columns: Optional[List[str]] = Query(default=None, description="Columns to match against."),
    settings: IndexSettings = Depends(get_settings),
) -> List[IndexRecord]:
    """
    Substring search, latest version per (name, bucket).
    """
    search_columns = columns or [c.value for c in DEFAULT_SEARCH_COLUMNS]
    try:
        return query.search(settings.db_path, q, search_columns)
    except ManifestIndexError as e:
        raise _http_error(e) from e


# ---------------------------------------------------------------------------
# 2. GET /buckets/{bucket}/apps/{name}
# ---------------------------------------------------------------------------

@router.get("/buckets/{bucket}/apps/{name}", response_model=IndexRecord)
def get_app(
    bucket: str,
    name: str,
    version: Optional[str] = Query(default=None, description="Exact version; latest when omitted."),
    settings: IndexSettings = Depends(get_settings),
) -> IndexRecord:
    try:
        results = query.lookup(settings.db_path, name, bucket, version)
    except ManifestIndexError as e:
        raise _http_error(e) from e

    if not results:
        raise HTTPException(status_code=404, detail="App not found")
    return results[0]


# ---------------------------------------------------------------------------
# 3. POST /index/rebuild
# ---------------------------------------------------------------------------

@router.post("/index/rebuild", response_model=RebuildSummary)
def rebuild(settings: IndexSettings = Depends(get_settings)) -> RebuildSummary:
    """
    Re-read every bucket manifest and write it into the index.
    """
    try:
        return rebuild_index(settings)
    except ManifestIndexError as e:
        raise _http_error(e) from e
