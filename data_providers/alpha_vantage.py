"""Alpha Vantage time-series price provider implementation."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Tuple

from data_pipeline.alpha_vantage_client import AlphaVantageClient

from .base import Interval, ParseError, PriceSeries

LOGGER = logging.getLogger(__name__)

PRICE_FIELD = "1. open"

# interval -> (API function, series key in the payload, extra query parameters)
SERIES_SPECS: Dict[Interval, Tuple[str, str, Dict[str, str]]] = {
    Interval.INTRADAY: ("TIME_SERIES_INTRADAY", "Time Series (5min)", {"interval": "5min"}),
    Interval.DAILY: ("TIME_SERIES_DAILY", "Time Series (Daily)", {}),
    Interval.WEEKLY: ("TIME_SERIES_WEEKLY", "Time Series (Weekly)", {}),
    Interval.MONTHLY: ("TIME_SERIES_MONTHLY", "Time Series (Monthly)", {}),
}


class AlphaVantagePriceProvider:
    """Retrieve price series from Alpha Vantage, one request per call."""

    def __init__(self, client: AlphaVantageClient) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_intraday(self, symbol: str) -> PriceSeries:
        return self.fetch(Interval.INTRADAY, symbol)

    def get_daily(self, symbol: str) -> PriceSeries:
        return self.fetch(Interval.DAILY, symbol)

    def get_weekly(self, symbol: str) -> PriceSeries:
        return self.fetch(Interval.WEEKLY, symbol)

    def get_monthly(self, symbol: str) -> PriceSeries:
        return self.fetch(Interval.MONTHLY, symbol)

    def fetch(self, interval: Interval, symbol: str) -> PriceSeries:
        function, series_key, extra = SERIES_SPECS[interval]
        payload = self.client.fetch_time_series(function, symbol, **extra)
        prices = self._parse_prices(payload, series_key)
        LOGGER.debug("Parsed %s %s prices for %s", len(prices), interval.value, symbol)
        return PriceSeries(symbol=symbol, interval=interval, prices=prices)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _parse_prices(payload: Mapping[str, Any], series_key: str) -> Dict[str, float]:
        series = payload.get(series_key)
        if not isinstance(series, Mapping):
            raise ParseError(f"Payload is missing '{series_key}'")

        prices: Dict[str, float] = {}
        for label, row in series.items():
            if not isinstance(row, Mapping) or PRICE_FIELD not in row:
                raise ParseError(f"Row {label!r} in '{series_key}' has no '{PRICE_FIELD}' value")
            try:
                prices[str(label)] = float(row[PRICE_FIELD])
            except (TypeError, ValueError) as exc:
                raise ParseError(f"Row {label!r} has a non-numeric price: {row[PRICE_FIELD]!r}") from exc
        return prices


__all__ = ["AlphaVantagePriceProvider", "SERIES_SPECS"]
