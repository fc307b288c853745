"""Dependency providers for FastAPI routes."""

from __future__ import annotations

from functools import lru_cache

from data_pipeline.alpha_vantage_client import AlphaVantageClient
from data_providers.alpha_vantage import AlphaVantagePriceProvider
from data_providers.base import PriceProvider
from stock_service.cache import MemoizingCache
from stock_service.facade import StockFacade

from .config import get_config, get_config_manager


@lru_cache(maxsize=1)
def get_price_cache() -> MemoizingCache:
    return MemoizingCache()


@lru_cache(maxsize=1)
def get_price_provider() -> PriceProvider:
    settings = get_config().alpha_vantage
    client = AlphaVantageClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
        max_retries=settings.max_retries,
        backoff_seconds=settings.backoff_seconds,
    )
    return AlphaVantagePriceProvider(client)


@lru_cache(maxsize=1)
def get_stock_facade() -> StockFacade:
    return StockFacade(get_price_provider(), get_price_cache())


def reset_dependencies() -> None:
    """Drop cached config and service instances so the next request rebuilds them."""

    for provider in (get_stock_facade, get_price_provider, get_price_cache, get_config):
        provider.cache_clear()
    get_config_manager.cache_clear()


__all__ = ["get_price_cache", "get_price_provider", "get_stock_facade", "reset_dependencies"]
