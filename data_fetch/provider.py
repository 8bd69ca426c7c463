"""Market data collaborator contract consumed by the signal scanner"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, runtime_checkable

from data_cleaner.price_series import PriceSeries
from fundamentals.fundamental_scorer import FundamentalMetrics


@dataclass(frozen=True)
class ScreenerFilters:
    """Pre-screen filters forwarded to the fundamentals provider"""
    market_cap_min: float
    market_cap_max: Optional[float] = None
    sector: Optional[str] = None
    country: Optional[str] = None
    exchange: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'marketCapMin': self.market_cap_min,
            'marketCapMax': self.market_cap_max,
            'sector': self.sector,
            'country': self.country,
            'exchange': self.exchange,
        }


@dataclass(frozen=True)
class ScreenerCandidate:
    """One company returned by the provider's pre-screen"""
    symbol: str
    company_name: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[float] = None
    price: Optional[float] = None
    exchange: Optional[str] = None


@runtime_checkable
class MarketDataProvider(Protocol):
    """
    Source of per-symbol inputs

    Methods may be plain or async; blocking implementations are run off the
    event loop by the batch engine. Returning None means "unavailable".
    """

    def get_price_history(self, symbol: str, lookback_days: int) -> Optional[PriceSeries]:
        ...

    def get_fundamental_metrics(self, symbol: str) -> Optional[FundamentalMetrics]:
        ...

    def get_screener_candidates(self, filters: ScreenerFilters) -> List[ScreenerCandidate]:
        ...
