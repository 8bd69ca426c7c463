"""Fallback fetcher using the Yahoo chart REST endpoint directly"""

import time
from typing import Dict, Optional, Tuple

import pandas as pd
import requests

from config import YAHOO_FINANCE_SETTINGS
from utils.helpers import normalize_symbol
from utils.logger import setup_logger

logger = setup_logger(__name__)


class FallbackFetcher:
    """Daily bars from query1.finance.yahoo.com/v8/finance/chart"""

    def __init__(self, session: requests.Session = None):
        """
        Initialize fallback fetcher

        Args:
            session: HTTP session (a new one by default)
        """
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": YAHOO_FINANCE_SETTINGS["user_agent"]})
        self.timeout = YAHOO_FINANCE_SETTINGS["timeout"]

    def fetch(self, ticker: str, lookback_days: int) -> Optional[Tuple[pd.DataFrame, str]]:
        """
        Fetch daily bars for the last `lookback_days` calendar days

        Args:
            ticker: Ticker symbol
            lookback_days: Calendar days of history

        Returns:
            (OHLCV DataFrame, display name) or None
        """
        ticker = normalize_symbol(ticker)
        end = int(time.time())
        start = end - lookback_days * 24 * 60 * 60
        url = YAHOO_FINANCE_SETTINGS["chart_url"].format(symbol=ticker)

        try:
            response = self.session.get(
                url,
                params={"period1": start, "period2": end, "interval": YAHOO_FINANCE_SETTINGS["interval"]},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching {ticker} from Yahoo chart API: {e}")
            return None

        return self.parse_chart(payload, ticker)

    @staticmethod
    def parse_chart(payload: Dict, ticker: str) -> Optional[Tuple[pd.DataFrame, str]]:
        """
        Parse a chart payload into an OHLCV DataFrame

        Bars with a null close are skipped; other null fields become 0.

        Args:
            payload: Decoded JSON response
            ticker: Requested symbol (used when the payload has no meta)

        Returns:
            (DataFrame, display name) or None when the payload is malformed
        """
        results = ((payload or {}).get("chart") or {}).get("result") or []
        if not results:
            logger.warning(f"No chart result for {ticker}")
            return None

        result = results[0]
        meta = result.get("meta") or {}
        timestamps = result.get("timestamp") or []
        quotes = ((result.get("indicators") or {}).get("quote") or [{}])[0]
        closes = quotes.get("close") or []

        rows = []
        for i, ts in enumerate(timestamps):
            if i >= len(closes) or closes[i] is None:
                continue
            rows.append({
                "Date": pd.Timestamp(ts, unit="s", tz="UTC").normalize(),
                "Open": _at(quotes.get("open"), i),
                "High": _at(quotes.get("high"), i),
                "Low": _at(quotes.get("low"), i),
                "Close": closes[i],
                "Volume": _at(quotes.get("volume"), i),
            })

        if not rows:
            return None

        df = pd.DataFrame(rows).set_index("Date")
        name = meta.get("shortName") or meta.get("symbol") or ticker
        return df, name


def _at(values, index: int) -> float:
    if not values or index >= len(values) or values[index] is None:
        return 0
    return values[index]
