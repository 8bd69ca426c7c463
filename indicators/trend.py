"""MACD line, signal line and histogram"""

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from config import INDICATOR_CONFIG
from data_cleaner.normalizer import has_min_length
from .moving_average import ema


@dataclass(frozen=True)
class MACDResult:
    macd: float
    signal: float
    histogram: float

    def to_dict(self) -> Dict[str, float]:
        return {'macd': self.macd, 'signal': self.signal, 'histogram': self.histogram}


def macd(values: Sequence[float], fast: int = None, slow: int = None, signal: int = None) -> MACDResult:
    """
    Calculate MACD for the most recent bar

    The signal line is the EMA of the MACD series obtained by recomputing
    EMA(fast) - EMA(slow) on every prefix from `slow` bars up to the whole
    series. That is quadratic in the series length, which stays small for
    daily lookbacks.

    Args:
        values: Closing prices, oldest first
        fast: Fast EMA period (12)
        slow: Slow EMA period (26)
        signal: Signal EMA period (9)

    Returns:
        MACDResult; all zeros when fewer than `slow` values exist
    """
    fast = fast or INDICATOR_CONFIG["MACD_FAST"]
    slow = slow or INDICATOR_CONFIG["MACD_SLOW"]
    signal = signal or INDICATOR_CONFIG["MACD_SIGNAL"]

    if not has_min_length(values, slow):
        return MACDResult(macd=0.0, signal=0.0, histogram=0.0)

    data = np.asarray(values, dtype=float)
    macd_line = ema(data, fast) - ema(data, slow)

    macd_values = [ema(data[:end], fast) - ema(data[:end], slow) for end in range(slow, len(data) + 1)]

    signal_line = ema(macd_values, signal) if has_min_length(macd_values, signal) else macd_line
    return MACDResult(macd=macd_line, signal=signal_line, histogram=macd_line - signal_line)
