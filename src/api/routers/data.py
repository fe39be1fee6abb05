"""
GET /api/data, GET /api/cache/stats, POST /api/cache/refresh -- raw rows and cache control.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.deps import get_current_user
from src.core.errors import DataFetchError
from src.core.logging import get_logger
from src.sheets.cache import DatasetCache, get_dataset_cache

logger = get_logger(__name__)
router = APIRouter()


@router.get("/data")
async def data_endpoint(
    user: str = Depends(get_current_user),
    cache: DatasetCache = Depends(get_dataset_cache),
):
    """Return every cached row in sheet order, newest-first as the sheet keeps them."""
    try:
        rows = await cache.get_dataset()
    except DataFetchError as exc:
        return JSONResponse(status_code=500, content={"success": False, "error": exc.message})

    return {
        "success": True,
        "count": len(rows),
        "latestDate": rows[0].date if rows else None,
        "data": [row.to_dict() for row in rows],
    }


@router.get("/cache/stats")
def cache_stats_endpoint(
    user: str = Depends(get_current_user),
    cache: DatasetCache = Depends(get_dataset_cache),
):
    """Return dataset cache statistics."""
    return cache.stats()


@router.post("/cache/refresh")
def cache_refresh_endpoint(
    user: str = Depends(get_current_user),
    cache: DatasetCache = Depends(get_dataset_cache),
):
    """Drop the cached rows; the next request refetches the sheet."""
    logger.info("Cache refresh requested by %s", user)
    return {"cleared": cache.invalidate()}
