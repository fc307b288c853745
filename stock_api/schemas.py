"""Pydantic schemas powering the stock API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field

from data_providers.base import Interval, PriceSeries


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime


class PriceSeriesResponse(BaseModel):
    symbol: str
    interval: Interval
    prices: Dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_series(cls, series: PriceSeries) -> "PriceSeriesResponse":
        return cls(symbol=series.symbol, interval=series.interval, prices=dict(series.prices))


class CacheStatsResponse(BaseModel):
    entries: int
    in_flight: int
    hits: int
    misses: int
    failures: int
    keys: List[str] = Field(default_factory=list)


class CacheInvalidateResponse(BaseModel):
    key: str
    removed: bool
    size: int


class CacheClearResponse(BaseModel):
    cleared: bool = True
    size: int
