"""
Fundamental quality/valuation scoring

A single scorer driven by factor tables. Each factor maps one nullable
metric onto bucketed points (25 at most); a score is the average of the
present factors scaled by 4 onto 0-100. Absent metrics are skipped, so a
company with no usable metrics scores 0.
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional, Sequence, Tuple

from config import SCREENER_CONFIG
from utils.errors import InvalidRequestError
from utils.helpers import clamp, is_number, round_half_up

MAX_BUCKET_POINTS = 25


@dataclass(frozen=True)
class FundamentalMetrics:
    """Latest annual ratios for one company; every ratio may be missing"""
    symbol: str
    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    roic: Optional[float] = None
    roe: Optional[float] = None
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    dividend_yield: Optional[float] = None
    free_cash_flow_yield: Optional[float] = None
    enterprise_value_over_ebitda: Optional[float] = None
    price_to_sales_ratio: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            'symbol': self.symbol,
            'peRatio': self.pe_ratio,
            'pbRatio': self.pb_ratio,
            'roic': self.roic,
            'roe': self.roe,
            'debtToEquity': self.debt_to_equity,
            'currentRatio': self.current_ratio,
            'dividendYield': self.dividend_yield,
            'freeCashFlowYield': self.free_cash_flow_yield,
            'enterpriseValueOverEBITDA': self.enterprise_value_over_ebitda,
            'priceToSalesRatio': self.price_to_sales_ratio,
        }


METRIC_FIELDS = tuple(f.name for f in fields(FundamentalMetrics) if f.name != 'symbol')


@dataclass(frozen=True)
class FactorRule:
    """
    Bucket table for one metric

    Buckets are (threshold, points) checked in order: with higher_is_better
    a value strictly above the threshold earns the points, otherwise a value
    strictly below it does. Values matching no bucket earn `fallback`.
    """
    metric: str
    buckets: Tuple[Tuple[float, int], ...]
    fallback: int
    higher_is_better: bool = True
    positive_only: bool = False

    def value_of(self, metrics: FundamentalMetrics) -> Optional[float]:
        value = getattr(metrics, self.metric)
        if not is_number(value):
            return None
        value = float(value)
        if self.positive_only and value <= 0:
            return None
        return value

    def points(self, value: float) -> int:
        for threshold, points in self.buckets:
            if (value > threshold) if self.higher_is_better else (value < threshold):
                return points
        return self.fallback


@dataclass(frozen=True)
class ScoringProfile:
    name: str
    quality: Tuple[FactorRule, ...]
    valuation: Tuple[FactorRule, ...]


ROIC = FactorRule("roic", ((20, 25), (15, 20), (10, 15), (5, 10)), fallback=5)
ROE = FactorRule("roe", ((20, 20), (15, 15), (10, 10)), fallback=5)
DEBT_TO_EQUITY = FactorRule(
    "debt_to_equity", ((0.3, 20), (0.5, 15), (1, 10), (2, 5)), fallback=0, higher_is_better=False
)
CURRENT_RATIO = FactorRule("current_ratio", ((2, 15), (1.5, 12), (1, 8)), fallback=3)
FCF_YIELD = FactorRule("free_cash_flow_yield", ((10, 20), (5, 15), (2, 10)), fallback=5)

# Valuation multiples are lower-is-better and meaningless when not positive
PE_RATIO = FactorRule(
    "pe_ratio", ((10, 25), (15, 20), (20, 15), (30, 10)), fallback=5,
    higher_is_better=False, positive_only=True,
)
PB_RATIO = FactorRule(
    "pb_ratio", ((1, 25), (2, 20), (3, 15), (5, 10)), fallback=5,
    higher_is_better=False, positive_only=True,
)
EV_EBITDA = FactorRule(
    "enterprise_value_over_ebitda", ((8, 25), (12, 20), (15, 15), (20, 10)), fallback=5,
    higher_is_better=False, positive_only=True,
)
PS_RATIO = FactorRule(
    "price_to_sales_ratio", ((1, 25), (2, 20), (3, 15), (5, 10)), fallback=5,
    higher_is_better=False, positive_only=True,
)

PROFILES: Dict[str, ScoringProfile] = {
    "screener": ScoringProfile(
        name="screener",
        quality=(ROIC, ROE, DEBT_TO_EQUITY, CURRENT_RATIO),
        valuation=(PE_RATIO, PB_RATIO, EV_EBITDA),
    ),
    "extended": ScoringProfile(
        name="extended",
        quality=(ROIC, ROE, DEBT_TO_EQUITY, CURRENT_RATIO, FCF_YIELD),
        valuation=(PE_RATIO, PB_RATIO, EV_EBITDA, PS_RATIO),
    ),
}


def score_factors(metrics: Optional[FundamentalMetrics], rules: Sequence[FactorRule]) -> int:
    """
    Average bucket points over the present factors, scaled to 0-100

    Args:
        metrics: Company metrics (None scores 0)
        rules: Factor tables to apply

    Returns:
        Integer score in [0, 100]
    """
    if metrics is None:
        return 0

    total = 0
    present = 0
    for rule in rules:
        value = rule.value_of(metrics)
        if value is None:
            continue
        total += rule.points(value)
        present += 1

    if present == 0:
        return 0
    return round_half_up(clamp((total / present) * (100 / MAX_BUCKET_POINTS)))


class FundamentalScorer:
    """Quality, valuation and total scores under one scoring profile"""

    def __init__(self, profile: str = None):
        profile = profile or SCREENER_CONFIG["SCORING_PROFILE"]
        if profile not in PROFILES:
            raise InvalidRequestError(
                f"Unknown scoring profile '{profile}'. Expected one of: {', '.join(sorted(PROFILES))}"
            )
        self.profile = PROFILES[profile]

    def quality_score(self, metrics: Optional[FundamentalMetrics]) -> int:
        return score_factors(metrics, self.profile.quality)

    def valuation_score(self, metrics: Optional[FundamentalMetrics]) -> int:
        return score_factors(metrics, self.profile.valuation)

    def score(self, metrics: Optional[FundamentalMetrics]) -> Tuple[int, int, int]:
        """
        Score one company

        Returns:
            (quality, valuation, total) where total is their rounded mean
        """
        quality = self.quality_score(metrics)
        valuation = self.valuation_score(metrics)
        return quality, valuation, round_half_up((quality + valuation) / 2)
