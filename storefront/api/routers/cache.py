"""API endpoints for the catalog response cache."""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from ...catalog.cache import TTLCache
from .products import get_response_cache

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@router.post("/clear")
async def clear_cache(cache: TTLCache = Depends(get_response_cache)):
    """Drop every cached catalog response."""
    cache.clear()
    return {
        "success": True,
        "message": "Cache cleared successfully",
        "timestamp": _timestamp(),
    }


@router.get("/stats")
async def cache_stats(cache: TTLCache = Depends(get_response_cache)):
    """Report cache size, capacity and hit/miss counters."""
    return {
        "success": True,
        "stats": cache.stats(),
        "timestamp": _timestamp(),
    }
