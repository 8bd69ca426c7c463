"""Data fetching module with multiple API support"""

from .provider import MarketDataProvider, ScreenerCandidate, ScreenerFilters
from .yahoo_fetcher import YahooFetcher
from .fallback_fetcher import FallbackFetcher
from .fmp_client import FMPClient
from .data_fetcher import DataFetcher

__all__ = [
    "MarketDataProvider",
    "ScreenerCandidate",
    "ScreenerFilters",
    "YahooFetcher",
    "FallbackFetcher",
    "FMPClient",
    "DataFetcher",
]
