"""Facade that serves price queries through the memoizing cache."""

from __future__ import annotations

from data_providers.base import Interval, PriceProvider, PriceSeries, cache_key

from .cache import MemoizingCache


class StockFacade:
    """Route each (interval, symbol) query to the cache, fetching from the provider on a miss."""

    def __init__(self, provider: PriceProvider, cache: MemoizingCache) -> None:
        self.provider = provider
        self.cache = cache

    def get(self, interval: Interval, symbol: str) -> PriceSeries:
        interval = Interval(interval)
        fetch = {
            Interval.INTRADAY: self.provider.get_intraday,
            Interval.DAILY: self.provider.get_daily,
            Interval.WEEKLY: self.provider.get_weekly,
            Interval.MONTHLY: self.provider.get_monthly,
        }[interval]
        return self.cache.get_or_compute(cache_key(interval, symbol), lambda: fetch(symbol))

    def get_intraday(self, symbol: str) -> PriceSeries:
        return self.get(Interval.INTRADAY, symbol)

    def get_daily(self, symbol: str) -> PriceSeries:
        return self.get(Interval.DAILY, symbol)

    def get_weekly(self, symbol: str) -> PriceSeries:
        return self.get(Interval.WEEKLY, symbol)

    def get_monthly(self, symbol: str) -> PriceSeries:
        return self.get(Interval.MONTHLY, symbol)


__all__ = ["StockFacade"]
