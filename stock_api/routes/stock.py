"""Price series endpoints, one per interval."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from data_providers.base import Interval, ParseError, ProviderError
from stock_service.facade import StockFacade

from ..dependencies import get_stock_facade
from ..schemas import PriceSeriesResponse

router = APIRouter(prefix="/stock", tags=["Stock"])
LOGGER = logging.getLogger(__name__)


def _lookup(facade: StockFacade, interval: Interval, symbol: str) -> PriceSeriesResponse:
    try:
        series = facade.get(interval, symbol)
    except ParseError as exc:
        LOGGER.error("Malformed %s payload for %s: %s", interval.value, symbol, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Malformed upstream payload for {symbol}: {exc}",
        ) from exc
    except ProviderError as exc:
        LOGGER.error("Provider failed for %s %s: %s", interval.value, symbol, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Upstream provider error for {symbol}: {exc}",
        ) from exc
    except Exception as exc:
        LOGGER.exception("Unexpected failure for %s %s", interval.value, symbol)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load price data",
        ) from exc
    return PriceSeriesResponse.from_series(series)


@router.get("/daily", response_model=PriceSeriesResponse)
def get_daily(
    symbol: str = Query(..., min_length=1, description="Ticker symbol (e.g. AAPL, MSFT)"),
    facade: StockFacade = Depends(get_stock_facade),
) -> PriceSeriesResponse:
    """Daily prices; cached for the lifetime of the process."""
    return _lookup(facade, Interval.DAILY, symbol)


@router.get("/intraday", response_model=PriceSeriesResponse)
def get_intraday(
    symbol: str = Query(..., min_length=1, description="Ticker symbol (e.g. AAPL, MSFT)"),
    facade: StockFacade = Depends(get_stock_facade),
) -> PriceSeriesResponse:
    """Intraday prices at 5-minute granularity."""
    return _lookup(facade, Interval.INTRADAY, symbol)


@router.get("/weekly", response_model=PriceSeriesResponse)
def get_weekly(
    symbol: str = Query(..., min_length=1, description="Ticker symbol (e.g. AAPL, MSFT)"),
    facade: StockFacade = Depends(get_stock_facade),
) -> PriceSeriesResponse:
    return _lookup(facade, Interval.WEEKLY, symbol)


@router.get("/monthly", response_model=PriceSeriesResponse)
def get_monthly(
    symbol: str = Query(..., min_length=1, description="Ticker symbol (e.g. AAPL, MSFT)"),
    facade: StockFacade = Depends(get_stock_facade),
) -> PriceSeriesResponse:
    return _lookup(facade, Interval.MONTHLY, symbol)
