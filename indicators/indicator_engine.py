"""Technical indicator snapshot engine"""

from dataclasses import dataclass
from typing import Dict

from config import INDICATOR_CONFIG
from data_cleaner.price_series import PriceSeries
from utils.helpers import safe_divide
from utils.logger import setup_logger
from .moving_average import sma, ema
from .oscillator import rsi
from .trend import macd

logger = setup_logger(__name__)


@dataclass(frozen=True)
class IndicatorSet:
    """Indicators evaluated against the most recent bar"""
    price: float
    rsi: float
    macd: float
    macd_signal: float
    histogram: float
    sma20: float
    sma50: float
    sma200: float
    ema12: float
    ema26: float
    volume_ratio: float  # Current volume / 20-day average volume

    # Price position, % above (+) or below (-) the average; 0 when the average is unavailable
    price_vs_sma50: float
    price_vs_sma200: float

    @property
    def rsi_signal(self) -> str:
        if self.rsi < INDICATOR_CONFIG["RSI_OVERSOLD"]:
            return 'oversold'
        if self.rsi > INDICATOR_CONFIG["RSI_OVERBOUGHT"]:
            return 'overbought'
        return 'neutral'

    @property
    def macd_signal_type(self) -> str:
        if self.histogram > 0 and self.macd > self.macd_signal:
            return 'bullish'
        if self.histogram < 0 and self.macd < self.macd_signal:
            return 'bearish'
        return 'neutral'

    @property
    def trend_signal(self) -> str:
        """Price stacked above (bullish) or below (bearish) the 50 and 200-day averages"""
        if self.price > self.sma50 > self.sma200:
            return 'bullish'
        if self.price < self.sma50 < self.sma200:
            return 'bearish'
        return 'neutral'

    @property
    def volume_signal(self) -> str:
        if self.volume_ratio > INDICATOR_CONFIG["VOLUME_HIGH_RATIO"]:
            return 'high'
        if self.volume_ratio < INDICATOR_CONFIG["VOLUME_LOW_RATIO"]:
            return 'low'
        return 'normal'

    def to_dict(self) -> Dict:
        return {
            'price': self.price,
            'rsi': self.rsi,
            'macd': self.macd,
            'macdSignal': self.macd_signal,
            'histogram': self.histogram,
            'sma20': self.sma20,
            'sma50': self.sma50,
            'sma200': self.sma200,
            'ema12': self.ema12,
            'ema26': self.ema26,
            'volumeRatio': self.volume_ratio,
            'priceVsSma50': self.price_vs_sma50,
            'priceVsSma200': self.price_vs_sma200,
            'rsiSignal': self.rsi_signal,
            'macdSignalType': self.macd_signal_type,
            'trendSignal': self.trend_signal,
            'volumeSignal': self.volume_signal,
        }


class IndicatorEngine:
    """Calculate the indicator snapshot used by the momentum composer"""

    def __init__(self):
        """Initialize indicator engine"""
        self.short_period, self.mid_period, self.long_period = INDICATOR_CONFIG["SMA_PERIODS"]
        self.rsi_period = INDICATOR_CONFIG["RSI_PERIOD"]
        self.macd_fast = INDICATOR_CONFIG["MACD_FAST"]
        self.macd_slow = INDICATOR_CONFIG["MACD_SLOW"]
        self.macd_signal = INDICATOR_CONFIG["MACD_SIGNAL"]
        self.volume_period = INDICATOR_CONFIG["VOLUME_AVG_PERIOD"]

    def calculate(self, series: PriceSeries) -> IndicatorSet:
        """
        Calculate all indicators for a price series

        Args:
            series: Normalized price series with at least one bar

        Returns:
            IndicatorSet snapshot
        """
        if series is None or len(series) == 0:
            raise ValueError("cannot compute indicators on an empty series")

        closes = series.closes
        volumes = series.volumes
        price = float(closes[-1])

        sma_short = sma(closes, self.short_period)
        sma_mid = sma(closes, self.mid_period)
        # Short histories fall back to the average of everything available
        sma_long = sma(closes, self.long_period) or sma(closes, len(closes))

        macd_result = macd(closes, self.macd_fast, self.macd_slow, self.macd_signal)

        avg_volume = sma(volumes, self.volume_period)
        volume_ratio = float(volumes[-1]) / avg_volume if avg_volume > 0 else 1.0

        indicators = IndicatorSet(
            price=price,
            rsi=rsi(closes, self.rsi_period),
            macd=macd_result.macd,
            macd_signal=macd_result.signal,
            histogram=macd_result.histogram,
            sma20=sma_short,
            sma50=sma_mid,
            sma200=sma_long,
            ema12=ema(closes, self.macd_fast),
            ema26=ema(closes, self.macd_slow),
            volume_ratio=volume_ratio,
            price_vs_sma50=safe_divide(price - sma_mid, sma_mid) * 100,
            price_vs_sma200=safe_divide(price - sma_long, sma_long) * 100,
        )

        logger.debug(
            f"{series.symbol}: rsi={indicators.rsi:.1f} hist={indicators.histogram:.3f} "
            f"vol_ratio={indicators.volume_ratio:.2f}"
        )
        return indicators
