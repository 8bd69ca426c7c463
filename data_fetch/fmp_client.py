"""Financial Modeling Prep client for screening and key metrics"""

from typing import Dict, List, Optional

import requests

from config import FMP_CONFIG
from fundamentals.fundamental_scorer import FundamentalMetrics
from utils.errors import ProviderConfigurationError
from utils.helpers import optional_float, normalize_symbol
from utils.logger import setup_logger
from .provider import ScreenerCandidate, ScreenerFilters

logger = setup_logger(__name__)

# key-metrics response field -> FundamentalMetrics field
KEY_METRIC_FIELDS = {
    "peRatio": "pe_ratio",
    "pbRatio": "pb_ratio",
    "roic": "roic",
    "roe": "roe",
    "debtToEquity": "debt_to_equity",
    "currentRatio": "current_ratio",
    "dividendYield": "dividend_yield",
    "freeCashFlowYield": "free_cash_flow_yield",
    "enterpriseValueOverEBITDA": "enterprise_value_over_ebitda",
    "priceToSalesRatio": "price_to_sales_ratio",
}


class FMPClient:
    """Thin wrapper over the FMP v3 REST API"""

    def __init__(self, api_key: str = None, session: requests.Session = None):
        """
        Initialize client

        Args:
            api_key: FMP API key (defaults to FMP_API_KEY from the environment)
            session: HTTP session
        """
        self.api_key = FMP_CONFIG["API_KEY"] if api_key is None else api_key
        self.base_url = FMP_CONFIG["BASE_URL"]
        self.timeout = FMP_CONFIG["TIMEOUT"]
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, path: str, params: Dict = None):
        if not self.is_configured:
            raise ProviderConfigurationError(
                "FMP API key not configured. Please add FMP_API_KEY to environment variables."
            )
        query = dict(params or {})
        query["apikey"] = self.api_key
        response = self.session.get(f"{self.base_url}/{path}", params=query, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def stock_screener(self, filters: ScreenerFilters) -> List[ScreenerCandidate]:
        """
        Run the FMP stock screener

        Args:
            filters: Market cap / sector / country / exchange filters

        Returns:
            Candidates in provider order

        Raises:
            ProviderConfigurationError: no API key
            requests.RequestException: transport or HTTP failure
        """
        params = {
            "marketCapMoreThan": int(filters.market_cap_min),
            "isEtf": "false",
            "isActivelyTrading": "true",
            "limit": FMP_CONFIG["SCREENER_FETCH_LIMIT"],
        }
        if filters.market_cap_max:
            params["marketCapLowerThan"] = int(filters.market_cap_max)
        if filters.sector:
            params["sector"] = filters.sector
        if filters.country:
            params["country"] = filters.country
        if filters.exchange:
            params["exchange"] = filters.exchange

        logger.info(f"Fetching FMP screener: {filters.to_dict()}")
        rows = self._get("stock-screener", params)
        if not isinstance(rows, list):
            logger.warning(f"Unexpected screener payload: {type(rows).__name__}")
            return []

        candidates = []
        for row in rows:
            symbol = normalize_symbol(row.get("symbol"))
            if not symbol:
                continue
            candidates.append(ScreenerCandidate(
                symbol=symbol,
                company_name=row.get("companyName"),
                sector=row.get("sector"),
                industry=row.get("industry") or "N/A",
                market_cap=row.get("marketCap"),
                price=row.get("price"),
                exchange=row.get("exchangeShortName") or row.get("exchange"),
            ))
        return candidates

    def key_metrics(self, symbol: str) -> Optional[FundamentalMetrics]:
        """
        Latest annual key metrics for a symbol

        Args:
            symbol: Ticker symbol

        Returns:
            FundamentalMetrics or None when FMP has nothing for the symbol
        """
        symbol = normalize_symbol(symbol)
        rows = self._get(f"key-metrics/{symbol}", {"period": "annual", "limit": 1})
        if not isinstance(rows, list) or not rows:
            return None
        return parse_key_metrics(symbol, rows[0])


def parse_key_metrics(symbol: str, row: Dict) -> FundamentalMetrics:
    """Map one key-metrics row onto FundamentalMetrics, dropping non-numeric values"""
    values = {field: optional_float(row.get(key)) for key, field in KEY_METRIC_FIELDS.items()}
    return FundamentalMetrics(symbol=symbol, **values)
