"""Admin endpoints for inspecting and resetting the in-process price cache.

These actions are process-local: with several workers, each one owns its own
cache and only the worker that serves the request is affected.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from stock_service.cache import MemoizingCache

from ..dependencies import get_price_cache
from ..schemas import CacheClearResponse, CacheInvalidateResponse, CacheStatsResponse

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger(__name__)


@router.get("/cache", response_model=CacheStatsResponse)
def cache_status(cache: MemoizingCache = Depends(get_price_cache)) -> CacheStatsResponse:
    """Return hit/miss counters and the keys currently cached."""
    stats = cache.stats()
    return CacheStatsResponse(
        entries=stats.entries,
        in_flight=stats.in_flight,
        hits=stats.hits,
        misses=stats.misses,
        failures=stats.failures,
        keys=cache.keys(),
    )


@router.delete("/cache/{key}", response_model=CacheInvalidateResponse)
def invalidate_cache_entry(
    key: str,
    cache: MemoizingCache = Depends(get_price_cache),
) -> CacheInvalidateResponse:
    """
    Drop one cached series, e.g. `DAILY_AAPL`.

    The next lookup for that key fetches fresh data from the provider.
    Unknown keys are accepted and reported with `removed: false`.
    """
    removed = cache.invalidate(key)
    logger.info("Admin invalidation of %s (removed=%s)", key, removed)
    return CacheInvalidateResponse(key=key, removed=removed, size=cache.size())


@router.delete("/cache", response_model=CacheClearResponse)
def clear_cache(cache: MemoizingCache = Depends(get_price_cache)) -> CacheClearResponse:
    """Drop every cached series."""
    cache.clear()
    return CacheClearResponse(cleared=True, size=cache.size())
