"""Fundamental metrics and scoring"""

from .fundamental_scorer import FundamentalMetrics, FundamentalScorer, PROFILES
from .financial_fetcher import FinancialFetcher

__all__ = ["FundamentalMetrics", "FundamentalScorer", "PROFILES", "FinancialFetcher"]
