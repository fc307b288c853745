"""Alpha Vantage API client for time-series price data."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import time

import requests

from data_providers.base import ProviderError

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"


class AlphaVantageError(ProviderError):
    """Raised when the Alpha Vantage API fails or returns an error payload."""


class AlphaVantageClient:
    """Thin wrapper around the Alpha Vantage REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        max_retries: int = 1,
        backoff_seconds: float = 1.0,
    ) -> None:
        if not api_key:
            raise ValueError("Alpha Vantage API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = max(0.0, backoff_seconds)

    # ------------------------------------------------------------------
    def fetch_time_series(self, function: str, symbol: str, **extra: str) -> Dict[str, Any]:
        """Return the decoded JSON payload for a ``TIME_SERIES_*`` *function*."""

        params = {"function": function, "symbol": symbol, **extra}

        last_exc: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            LOGGER.info("Calling Alpha Vantage %s for %s (attempt %s/%s)", function, symbol, attempt, self.max_retries)
            try:
                response = self.session.get(
                    self.base_url,
                    params={**params, "apikey": self.api_key},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                if status is not None and status < 500:
                    raise AlphaVantageError(f"Alpha Vantage returned HTTP {status} for {symbol}") from exc
                last_exc = exc
                LOGGER.warning(
                    "Alpha Vantage HTTP error for %s %s (attempt %s/%s): %s",
                    function,
                    symbol,
                    attempt,
                    self.max_retries,
                    exc,
                )
            except (requests.RequestException, ValueError) as exc:
                last_exc = exc
                LOGGER.warning(
                    "Alpha Vantage request failed for %s %s (attempt %s/%s): %s",
                    function,
                    symbol,
                    attempt,
                    self.max_retries,
                    exc,
                )
            else:
                LOGGER.info("Received Alpha Vantage response for %s %s", function, symbol)
                return self._check_payload(payload, symbol)

            if attempt < self.max_retries and self.backoff_seconds:
                self._sleep(self.backoff_seconds)

        raise AlphaVantageError(f"Failed to fetch {function} for {symbol}") from last_exc

    # ------------------------------------------------------------------
    @staticmethod
    def _check_payload(payload: Any, symbol: str) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise AlphaVantageError("Unexpected time series payload format")

        if payload.get("Error Message"):
            raise AlphaVantageError(f"{symbol}: {payload['Error Message']}")
        # Throttling and key problems both arrive as 200 responses.
        for field_name in ("Note", "Information"):
            if payload.get(field_name):
                raise AlphaVantageError(str(payload[field_name]))
        return payload

    @staticmethod
    def _sleep(seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


__all__ = ["AlphaVantageClient", "AlphaVantageError", "DEFAULT_BASE_URL"]
