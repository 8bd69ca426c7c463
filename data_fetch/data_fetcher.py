"""Main data fetcher with fallback support"""

from typing import List, Optional
from config import BATCH_CONFIG
from .yahoo_fetcher import YahooFetcher
from .fallback_fetcher import FallbackFetcher
from .fmp_client import FMPClient
from .provider import ScreenerCandidate, ScreenerFilters
from data_cleaner.normalizer import DataNormalizer
from data_cleaner.price_series import PriceSeries
from fundamentals.financial_fetcher import FinancialFetcher
from fundamentals.fundamental_scorer import FundamentalMetrics
from utils.logger import setup_logger

logger = setup_logger(__name__)


class DataFetcher:
    """Default MarketDataProvider: Yahoo prices with fallback, CSV/FMP fundamentals"""

    def __init__(
        self,
        yahoo_fetcher: YahooFetcher = None,
        fallback_fetcher: FallbackFetcher = None,
        fmp_client: FMPClient = None,
        financial_fetcher: FinancialFetcher = None,
        normalizer: DataNormalizer = None,
    ):
        """Initialize data fetcher"""
        self.yahoo_fetcher = yahoo_fetcher or YahooFetcher()
        self.fallback_fetcher = fallback_fetcher or FallbackFetcher()
        self.fmp_client = fmp_client or FMPClient()
        self.financial_fetcher = financial_fetcher or FinancialFetcher()
        self.normalizer = normalizer or DataNormalizer()

    def get_price_history(self, symbol: str, lookback_days: int = None) -> Optional[PriceSeries]:
        """
        Fetch and normalize daily bars

        Args:
            symbol: Ticker symbol
            lookback_days: Calendar days of history

        Returns:
            PriceSeries or None when both sources fail
        """
        lookback_days = lookback_days or BATCH_CONFIG["LOOKBACK_DAYS"]
        name = None

        df = self.yahoo_fetcher.fetch_data(symbol, lookback_days)
        if df is None:
            logger.info(f"Yahoo Finance failed for {symbol}, trying fallback...")
            fetched = self.fallback_fetcher.fetch(symbol, lookback_days)
            if fetched is None:
                return None
            df, name = fetched

        return self.normalizer.normalize(df, symbol, name)

    def get_fundamental_metrics(self, symbol: str) -> Optional[FundamentalMetrics]:
        """
        Latest ratios for a symbol, preferring the offline CSV

        Raises:
            ProviderConfigurationError: CSV has no row and no FMP key is set
        """
        metrics = self.financial_fetcher.get(symbol)
        if metrics is not None:
            return metrics
        return self.fmp_client.key_metrics(symbol)

    def get_screener_candidates(self, filters: ScreenerFilters) -> List[ScreenerCandidate]:
        return self.fmp_client.stock_screener(filters)
