from .alpha_vantage_client import AlphaVantageClient, AlphaVantageError

__all__ = [
    'AlphaVantageClient',
    'AlphaVantageError',
]
