"""Offline fundamentals loaded from a CSV file"""

import threading
import pandas as pd
from pathlib import Path
from typing import Dict, Optional
from config import FUNDAMENTALS_CONFIG
from utils.helpers import normalize_symbol, optional_float
from utils.logger import setup_logger
from .fundamental_scorer import FundamentalMetrics, METRIC_FIELDS

logger = setup_logger(__name__)

# camelCase CSV headers accepted alongside the snake_case field names
COLUMN_ALIASES = {
    "peRatio": "pe_ratio",
    "pbRatio": "pb_ratio",
    "debtToEquity": "debt_to_equity",
    "currentRatio": "current_ratio",
    "dividendYield": "dividend_yield",
    "freeCashFlowYield": "free_cash_flow_yield",
    "enterpriseValueOverEBITDA": "enterprise_value_over_ebitda",
    "priceToSalesRatio": "price_to_sales_ratio",
}


class FinancialFetcher:
    def __init__(self, csv_path: Path = None, enabled: bool = None):
        self.enabled = FUNDAMENTALS_CONFIG["CSV_ENABLED"] if enabled is None else enabled
        self.csv_path = Path(csv_path or FUNDAMENTALS_CONFIG["CSV_PATH"])
        self.cache: Dict[str, FundamentalMetrics] = {}
        self._loaded = False
        # get() is called from worker threads during a screener run
        self._lock = threading.Lock()

    def _load_csv(self):
        with self._lock:
            if self._loaded:
                return
            if not self.csv_path.exists():
                logger.warning(f"Fundamentals CSV not found: {self.csv_path}")
                self._loaded = True
                return

            cache = {}
            df = pd.read_csv(self.csv_path).rename(columns=COLUMN_ALIASES)
            for row in df.to_dict(orient="records"):
                ticker = normalize_symbol(str(row.get('ticker') or row.get('symbol') or ''))
                if not ticker:
                    continue
                values = {field: optional_float(row.get(field)) for field in METRIC_FIELDS}
                cache[ticker] = FundamentalMetrics(symbol=ticker, **values)

            self.cache = cache
            self._loaded = True
            logger.info(f"Loaded fundamentals for {len(cache)} tickers")

    def get(self, ticker: str) -> Optional[FundamentalMetrics]:
        if not self.enabled:
            return None
        self._load_csv()
        return self.cache.get(normalize_symbol(ticker))
