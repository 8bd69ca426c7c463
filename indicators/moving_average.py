"""Simple and exponential moving averages over the most recent bar"""

from typing import Sequence

import numpy as np

from data_cleaner.normalizer import has_min_length


def sma(values: Sequence[float], period: int) -> float:
    """
    Simple moving average of the last `period` values

    Returns 0 when fewer than `period` values are available.
    """
    if not has_min_length(values, period):
        return 0.0
    window = np.asarray(values, dtype=float)[-period:]
    return float(window.sum() / period)


def ema(values: Sequence[float], period: int) -> float:
    """
    Exponential moving average seeded with the SMA of the first `period` values

    Returns 0 when fewer than `period` values are available.
    """
    if not has_min_length(values, period):
        return 0.0
    data = np.asarray(values, dtype=float)
    multiplier = 2 / (period + 1)
    value = float(data[:period].sum() / period)
    for price in data[period:]:
        value = (float(price) - value) * multiplier + value
    return value
