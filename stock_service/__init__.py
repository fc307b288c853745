from .cache import CacheStats, MemoizingCache
from .facade import StockFacade

__all__ = [
    'CacheStats',
    'MemoizingCache',
    'StockFacade',
]
