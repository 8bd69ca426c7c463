"""Yahoo Finance data fetcher with retry and error handling"""

import yfinance as yf
import pandas as pd
from typing import Optional
from config import YAHOO_FINANCE_SETTINGS
from utils.logger import setup_logger
from utils.helpers import normalize_symbol, retry_on_failure

logger = setup_logger(__name__)


class YahooFetcher:
    """Yahoo Finance daily history through yfinance"""

    def __init__(self):
        """Initialize Yahoo fetcher"""
        self.settings = YAHOO_FINANCE_SETTINGS

    @retry_on_failure(
        max_retries=YAHOO_FINANCE_SETTINGS["retry_count"],
        delay=YAHOO_FINANCE_SETTINGS["retry_delay"],
        exceptions=(ConnectionError, TimeoutError, OSError),
    )
    def _history(self, symbol: str, start: pd.Timestamp, end: pd.Timestamp) -> pd.DataFrame:
        stock = yf.Ticker(symbol)
        return stock.history(
            start=start.strftime("%Y-%m-%d"),
            end=end.strftime("%Y-%m-%d"),
            interval=self.settings["interval"],
            timeout=self.settings["timeout"],
        )

    def fetch_data(self, ticker: str, lookback_days: int) -> Optional[pd.DataFrame]:
        """
        Fetch OHLCV data from Yahoo Finance

        Args:
            ticker: Ticker symbol
            lookback_days: Calendar days of history to request

        Returns:
            DataFrame with OHLCV data or None
        """
        ticker = normalize_symbol(ticker)
        end = pd.Timestamp.utcnow().normalize() + pd.Timedelta(days=1)
        start = end - pd.Timedelta(days=lookback_days + 1)

        try:
            logger.debug(f"Fetching {ticker} from Yahoo Finance...")
            df = self._history(ticker, start, end)
        except Exception as e:
            logger.error(f"Error fetching {ticker}: {e}")
            return None

        if df is None or df.empty:
            logger.warning(f"No data returned for {ticker}")
            return None

        # Fix multi-index columns if present
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.droplevel(1)

        logger.debug(f"Fetched {ticker}: {len(df)} rows")
        return df