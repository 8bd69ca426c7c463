"""Ranking engine for sorting and summarizing results"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from config import SCREENER_CONFIG
from data_fetch.provider import ScreenerCandidate
from fundamentals.fundamental_scorer import FundamentalMetrics
from screener.momentum_composer import MomentumSignal, SignalType
from utils.errors import InvalidRequestError
from utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class SignalSummary:
    """Counts of signals per category"""
    total: int
    strong_buy: int
    buy: int
    hold: int
    sell: int  # SELL + STRONG_SELL

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'strongBuy': self.strong_buy,
            'buy': self.buy,
            'hold': self.hold,
            'sell': self.sell,
        }


@dataclass(frozen=True)
class ScreenerResult:
    """One scored and ranked screener row"""
    candidate: ScreenerCandidate
    metrics: Optional[FundamentalMetrics]
    quality_score: int
    valuation_score: int
    total_score: int
    rank: int = 0

    @property
    def symbol(self) -> str:
        return self.candidate.symbol

    def score_for(self, sort_by: str) -> int:
        return {
            'quality': self.quality_score,
            'valuation': self.valuation_score,
            'total': self.total_score,
        }[sort_by]

    def to_dict(self) -> Dict:
        candidate = self.candidate
        metrics = self.metrics or FundamentalMetrics(symbol=candidate.symbol)
        return {
            'symbol': candidate.symbol,
            'companyName': candidate.company_name,
            'sector': candidate.sector,
            'industry': candidate.industry or 'N/A',
            'marketCap': candidate.market_cap,
            'price': candidate.price,
            'exchange': candidate.exchange,
            'peRatio': metrics.pe_ratio,
            'pbRatio': metrics.pb_ratio,
            'roic': metrics.roic,
            'roe': metrics.roe,
            'debtToEquity': metrics.debt_to_equity,
            'currentRatio': metrics.current_ratio,
            'dividendYield': metrics.dividend_yield,
            'freeCashFlowYield': metrics.free_cash_flow_yield,
            'qualityScore': self.quality_score,
            'valuationScore': self.valuation_score,
            'totalScore': self.total_score,
            'rank': self.rank,
        }


class RankingEngine:
    """Order momentum signals and rank screener results"""

    def order_signals(self, signals: Sequence[MomentumSignal]) -> List[MomentumSignal]:
        """
        Actionable signals (STRONG_BUY/BUY) first, then the rest

        Each partition is sorted by strength descending, ties by symbol.

        Args:
            signals: Signals in any order

        Returns:
            New ordered list
        """
        ordered = sorted(signals, key=lambda s: (-s.strength, s.symbol))
        actionable = [s for s in ordered if s.signal.is_actionable]
        others = [s for s in ordered if not s.signal.is_actionable]
        return actionable + others

    def summarize(self, signals: Sequence[MomentumSignal]) -> SignalSummary:
        def count(*types: SignalType) -> int:
            return sum(1 for s in signals if s.signal in types)

        return SignalSummary(
            total=len(signals),
            strong_buy=count(SignalType.STRONG_BUY),
            buy=count(SignalType.BUY),
            hold=count(SignalType.HOLD),
            sell=count(SignalType.SELL, SignalType.STRONG_SELL),
        )

    def rank_screener_results(
        self,
        results: Sequence[ScreenerResult],
        sort_by: str = None,
        limit: int = None,
    ) -> List[ScreenerResult]:
        """
        Sort by the chosen score, truncate and assign 1-based ranks

        Args:
            results: Scored rows
            sort_by: 'total', 'quality' or 'valuation'
            limit: Maximum rows returned

        Returns:
            Ranked rows

        Raises:
            InvalidRequestError: unknown sort key or non-positive limit
        """
        sort_by = validate_sort_key(sort_by)
        limit = validate_limit(limit)

        ordered = sorted(results, key=lambda r: (-r.score_for(sort_by), r.symbol))[:limit]
        return [
            ScreenerResult(
                candidate=r.candidate,
                metrics=r.metrics,
                quality_score=r.quality_score,
                valuation_score=r.valuation_score,
                total_score=r.total_score,
                rank=index,
            )
            for index, r in enumerate(ordered, start=1)
        ]


def validate_sort_key(sort_by: Optional[str]) -> str:
    sort_by = sort_by or SCREENER_CONFIG["DEFAULT_SORT"]
    if sort_by not in SCREENER_CONFIG["SORT_KEYS"]:
        raise InvalidRequestError(
            f"Invalid sortBy '{sort_by}'. Expected one of: {', '.join(SCREENER_CONFIG['SORT_KEYS'])}"
        )
    return sort_by


def validate_limit(limit: Optional[int]) -> int:
    limit = SCREENER_CONFIG["LIMIT"] if limit is None else limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidRequestError(f"limit must be a positive integer, got {limit!r}")
    return limit
