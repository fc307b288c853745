"""Price series model, provider protocol and provider error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Protocol

import pandas as pd


class ProviderError(RuntimeError):
    """Raised when the upstream provider cannot deliver a price series."""


class ParseError(ProviderError):
    """Raised when an upstream payload lacks the expected time-series structure."""


class Interval(str, Enum):
    """Granularity of a price series."""

    INTRADAY = "INTRADAY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


def cache_key(interval: Interval | str, symbol: str) -> str:
    """Return the memoization key for one (interval, symbol) query, e.g. ``DAILY_AAPL``."""

    tag = interval.value if isinstance(interval, Interval) else Interval(interval).value
    return f"{tag}_{symbol}"


@dataclass(frozen=True)
class PriceSeries:
    """Prices for one symbol and interval, keyed by timestamp label."""

    symbol: str
    interval: Interval
    prices: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "interval", Interval(self.interval))
        # Stored series are shared between callers, so the mapping is read-only.
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "interval": self.interval.value,
            "prices": dict(self.prices),
        }

    def to_series(self) -> pd.Series:
        """Return prices as a float Series sorted by timestamp label."""
        series = pd.Series(dict(self.prices), dtype="float64", name=self.symbol)
        series.index.name = "date"
        return series.sort_index()


class PriceProvider(Protocol):
    """Protocol describing the price data operations the service depends on."""

    def get_intraday(self, symbol: str) -> PriceSeries:
        """Return 5-minute prices for *symbol*."""

    def get_daily(self, symbol: str) -> PriceSeries:
        """Return daily prices for *symbol*."""

    def get_weekly(self, symbol: str) -> PriceSeries:
        """Return weekly prices for *symbol*."""

    def get_monthly(self, symbol: str) -> PriceSeries:
        """Return monthly prices for *symbol*."""


__all__ = [
    "Interval",
    "ParseError",
    "PriceProvider",
    "PriceSeries",
    "ProviderError",
    "cache_key",
]
