"""
Momentum composer

Turns an indicator snapshot into a 0-100 strength score, a signal category,
trade parameters and human-readable bullish/bearish tags.

Two scoring strategies share the RSI and MACD stages and differ in how the
trend and volume stages are read:
- short_trend: price vs SMA50 with SMA50 held above 98% of SMA20; volume
  surge only counts with a positive histogram.
- long_trend: price vs SMA50 vs SMA200 stack; graded volume with a penalty
  for heavy volume on a negative histogram.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from config import MOMENTUM_CONFIG, SIGNAL_THRESHOLDS, TRADE_CONFIG
from data_cleaner.price_series import PriceSeries
from indicators.indicator_engine import IndicatorEngine, IndicatorSet
from utils.errors import InvalidRequestError
from utils.helpers import clamp, round_half_up, round_to_precision
from utils.logger import setup_logger

logger = setup_logger(__name__)


class SignalType(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"

    @property
    def is_actionable(self) -> bool:
        return self in (SignalType.STRONG_BUY, SignalType.BUY)


@dataclass(frozen=True)
class TradeSetup:
    """Entry/exit parameters derived from price and strength"""
    entry_price: float
    target_price: float
    stop_loss: float
    potential_gain: int  # %
    risk_reward: float


@dataclass(frozen=True)
class MomentumSignal:
    """Scored momentum signal for one symbol"""
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    signal: SignalType
    strength: int
    rsi: int
    macd_histogram: float
    volume_ratio: float
    trend_strength: float  # Distance from the 50-day average, %
    entry_price: float
    target_price: float
    stop_loss: float
    potential_gain: int
    risk_reward: float
    bullish_signals: Tuple[str, ...]
    bearish_signals: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return {
            'symbol': self.symbol,
            'name': self.name,
            'price': self.price,
            'change': self.change,
            'changePercent': self.change_percent,
            'signal': self.signal.value,
            'strength': self.strength,
            'rsi': self.rsi,
            'macdHistogram': self.macd_histogram,
            'volumeRatio': self.volume_ratio,
            'trendStrength': self.trend_strength,
            'entryPrice': self.entry_price,
            'targetPrice': self.target_price,
            'stopLoss': self.stop_loss,
            'potentialGain': self.potential_gain,
            'riskReward': self.risk_reward,
            'bullishSignals': list(self.bullish_signals),
            'bearishSignals': list(self.bearish_signals),
        }


def classify_strength(strength: int) -> SignalType:
    """Map a strength score to its signal category (thresholds inclusive)"""
    if strength >= SIGNAL_THRESHOLDS["STRONG_BUY"]:
        return SignalType.STRONG_BUY
    if strength >= SIGNAL_THRESHOLDS["BUY"]:
        return SignalType.BUY
    if strength <= SIGNAL_THRESHOLDS["STRONG_SELL"]:
        return SignalType.STRONG_SELL
    if strength <= SIGNAL_THRESHOLDS["SELL"]:
        return SignalType.SELL
    return SignalType.HOLD


def target_percent(strength: int) -> float:
    for min_strength, pct in TRADE_CONFIG["TARGET_TIERS"]:
        if strength >= min_strength:
            return pct
    return TRADE_CONFIG["DEFAULT_TARGET_PCT"]


def build_trade_setup(price: float, strength: int) -> TradeSetup:
    """
    Derive entry, target and stop from the current price

    Args:
        price: Current (entry) price
        strength: Momentum strength 0-100

    Returns:
        TradeSetup with prices rounded to cents and risk/reward to 1 decimal
    """
    stop_pct = TRADE_CONFIG["STOP_LOSS_PCT"]
    target_pct = target_percent(strength)
    return TradeSetup(
        entry_price=price,
        target_price=round_to_precision(price * (1 + target_pct), 2),
        stop_loss=round_to_precision(price * (1 - stop_pct), 2),
        potential_gain=round_half_up(target_pct * 100),
        risk_reward=round_to_precision(target_pct / stop_pct, 1),
    )


def price_change(closes) -> Tuple[float, float]:
    """
    Absolute and percent change of the last close against the previous one

    A zero previous close gives a 0.0 percent change instead of inf/NaN.
    """
    current = float(closes[-1])
    previous = float(closes[-2]) if len(closes) >= 2 else current
    change = current - previous
    change_percent = (change / previous) * 100 if previous != 0 else 0.0
    return change, change_percent


def rsi_adjustment(indicators: IndicatorSet) -> int:
    rsi = indicators.rsi
    if rsi < MOMENTUM_CONFIG["RSI_OVERSOLD"]:
        return 15
    if rsi < MOMENTUM_CONFIG["RSI_NEAR_OVERSOLD"]:
        return 10
    if rsi > MOMENTUM_CONFIG["RSI_OVERBOUGHT"]:
        return -15
    if rsi > MOMENTUM_CONFIG["RSI_NEAR_OVERBOUGHT"]:
        return -5
    return 0


def macd_adjustment(indicators: IndicatorSet) -> int:
    hist = indicators.histogram
    if hist > 0 and indicators.macd > indicators.macd_signal:
        return 15
    if hist > 0:
        return 8
    if hist < 0 and indicators.macd < indicators.macd_signal:
        return -15
    if hist < 0:
        return -8
    return 0


class ScoringStrategy:
    """Trend/volume stages and tag wording for one scoring rule set"""

    name = ""

    def trend_adjustment(self, indicators: IndicatorSet) -> int:
        raise NotImplementedError

    def volume_adjustment(self, indicators: IndicatorSet) -> int:
        raise NotImplementedError

    def collect_tags(self, indicators: IndicatorSet) -> Tuple[List[str], List[str]]:
        raise NotImplementedError


class ShortTrendStrategy(ScoringStrategy):
    """Trend read against SMA20/SMA50; the scanner's default rules"""

    name = "short_trend"

    def trend_adjustment(self, indicators: IndicatorSet) -> int:
        price, sma20, sma50 = indicators.price, indicators.sma20, indicators.sma50
        if price > sma50 and sma50 > sma20 * MOMENTUM_CONFIG["SMA20_TOLERANCE"]:
            return 10
        if price > sma50:
            return 5
        if price < sma50:
            return -10
        return 0

    def volume_adjustment(self, indicators: IndicatorSet) -> int:
        if indicators.volume_ratio > MOMENTUM_CONFIG["VOLUME_SURGE"] and indicators.histogram > 0:
            return 10
        return 0

    def collect_tags(self, indicators: IndicatorSet) -> Tuple[List[str], List[str]]:
        bullish, bearish = [], []

        if indicators.rsi < MOMENTUM_CONFIG["RSI_OVERSOLD"]:
            bullish.append("RSI oversold")
        elif indicators.rsi > MOMENTUM_CONFIG["RSI_OVERBOUGHT"]:
            bearish.append("RSI overbought")

        if indicators.histogram > 0 and indicators.macd > indicators.macd_signal:
            bullish.append("MACD bullish")
        elif indicators.histogram < 0:
            bearish.append("MACD bearish")

        if indicators.price > indicators.sma50:
            bullish.append("Above 50-MA")
        else:
            bearish.append("Below 50-MA")

        if indicators.volume_ratio > MOMENTUM_CONFIG["VOLUME_SURGE"]:
            bullish.append(f"Volume {indicators.volume_ratio:.1f}x")

        return bullish, bearish


class LongTrendStrategy(ScoringStrategy):
    """Trend read against the SMA50/SMA200 stack with graded volume"""

    name = "long_trend"

    def trend_adjustment(self, indicators: IndicatorSet) -> int:
        price, sma50, sma200 = indicators.price, indicators.sma50, indicators.sma200
        if price > sma50 and sma50 > sma200:
            return 10
        if price > sma50:
            return 5
        if price < sma50 and sma50 < sma200:
            return -10
        if price < sma50:
            return -5
        return 0

    def volume_adjustment(self, indicators: IndicatorSet) -> int:
        ratio, hist = indicators.volume_ratio, indicators.histogram
        if ratio > MOMENTUM_CONFIG["VOLUME_HEAVY"] and hist > 0:
            return 10
        if ratio > MOMENTUM_CONFIG["VOLUME_SURGE"] and hist > 0:
            return 5
        if ratio > MOMENTUM_CONFIG["VOLUME_HEAVY"] and hist < 0:
            return -5
        return 0

    def collect_tags(self, indicators: IndicatorSet) -> Tuple[List[str], List[str]]:
        bullish, bearish = [], []
        rsi = indicators.rsi

        if rsi < MOMENTUM_CONFIG["RSI_OVERSOLD"]:
            bullish.append("RSI oversold (<30)")
        elif rsi < MOMENTUM_CONFIG["RSI_NEAR_OVERSOLD"]:
            bullish.append("RSI approaching oversold")
        elif rsi > MOMENTUM_CONFIG["RSI_OVERBOUGHT"]:
            bearish.append("RSI overbought (>70)")
        elif rsi > MOMENTUM_CONFIG["RSI_NEAR_OVERBOUGHT"]:
            bearish.append("RSI approaching overbought")

        if indicators.histogram > 0 and indicators.macd > indicators.macd_signal:
            bullish.append("MACD bullish crossover")
        elif indicators.histogram < 0 and indicators.macd < indicators.macd_signal:
            bearish.append("MACD bearish crossover")

        price, sma50, sma200 = indicators.price, indicators.sma50, indicators.sma200
        if price > sma50 and sma50 > sma200:
            bullish.append("Price above 50 & 200 MA (uptrend)")
        elif price < sma50 and sma50 < sma200:
            bearish.append("Price below 50 & 200 MA (downtrend)")

        if indicators.volume_ratio > MOMENTUM_CONFIG["VOLUME_SURGE"] and indicators.histogram > 0:
            bullish.append(f"High volume ({indicators.volume_ratio:.1f}x avg)")

        if 0 < indicators.price_vs_sma50 < MOMENTUM_CONFIG["NEAR_SUPPORT_PCT"]:
            bullish.append("Near 50-day support")

        return bullish, bearish


STRATEGIES: Dict[str, ScoringStrategy] = {
    strategy.name: strategy for strategy in (ShortTrendStrategy(), LongTrendStrategy())
}


def get_strategy(name: Optional[str] = None) -> ScoringStrategy:
    """Look up a scoring strategy by name (None selects the configured default)"""
    name = name or MOMENTUM_CONFIG["DEFAULT_STRATEGY"]
    try:
        return STRATEGIES[name]
    except KeyError:
        raise InvalidRequestError(
            f"Unknown scoring strategy '{name}'. Expected one of: {', '.join(sorted(STRATEGIES))}"
        ) from None


class MomentumComposer:
    """Score, classify and annotate a price series"""

    def __init__(self, strategy: Optional[str] = None, indicator_engine: IndicatorEngine = None):
        """
        Initialize composer

        Args:
            strategy: Scoring strategy name (defaults to config)
            indicator_engine: Indicator engine to use
        """
        self.strategy = get_strategy(strategy)
        self.indicator_engine = indicator_engine or IndicatorEngine()

    def score(self, indicators: IndicatorSet) -> int:
        """
        Additive momentum score, clamped to [0, 100]

        Every stage reads the indicator snapshot, never the running score.
        """
        score = MOMENTUM_CONFIG["BASE_SCORE"]
        score += rsi_adjustment(indicators)
        score += macd_adjustment(indicators)
        score += self.strategy.trend_adjustment(indicators)
        score += self.strategy.volume_adjustment(indicators)
        return round_half_up(clamp(score, 0, 100))

    def compose(self, series: PriceSeries, indicators: IndicatorSet = None) -> MomentumSignal:
        """
        Build the momentum signal for a series

        Args:
            series: Normalized price series
            indicators: Precomputed snapshot (computed when omitted)

        Returns:
            MomentumSignal
        """
        indicators = indicators or self.indicator_engine.calculate(series)
        price = indicators.price
        change, change_percent = price_change(series.closes)

        strength = self.score(indicators)
        signal = classify_strength(strength)
        setup = build_trade_setup(price, strength)
        bullish, bearish = self.strategy.collect_tags(indicators)

        logger.debug(f"{series.symbol}: strength={strength} signal={signal.value} ({self.strategy.name})")

        return MomentumSignal(
            symbol=series.symbol,
            name=series.name,
            price=price,
            change=change,
            change_percent=change_percent,
            signal=signal,
            strength=strength,
            rsi=round_half_up(indicators.rsi),
            macd_histogram=indicators.histogram,
            volume_ratio=round_to_precision(indicators.volume_ratio, 1),
            trend_strength=round_to_precision(abs(indicators.price_vs_sma50), 2),
            entry_price=setup.entry_price,
            target_price=setup.target_price,
            stop_loss=setup.stop_loss,
            potential_gain=setup.potential_gain,
            risk_reward=setup.risk_reward,
            bullish_signals=tuple(bullish),
            bearish_signals=tuple(bearish),
        )
