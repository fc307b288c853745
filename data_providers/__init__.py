from .base import Interval, ParseError, PriceProvider, PriceSeries, ProviderError, cache_key

__all__ = [
    'Interval',
    'ParseError',
    'PriceProvider',
    'PriceSeries',
    'ProviderError',
    'cache_key',
]
