"""Relative Strength Index with Wilder smoothing"""

from typing import Sequence

import numpy as np

from config import INDICATOR_CONFIG
from data_cleaner.normalizer import has_min_length


def rsi(values: Sequence[float], period: int = None) -> float:
    """
    Calculate RSI against the most recent value

    Args:
        values: Closing prices, oldest first
        period: Lookback (defaults to config, 14)

    Returns:
        RSI in [0, 100]; neutral 50 when fewer than period+1 values exist,
        100 when there were no losses at all
    """
    period = period or INDICATOR_CONFIG["RSI_PERIOD"]
    if not has_min_length(values, period + 1):
        return INDICATOR_CONFIG["RSI_NEUTRAL"]

    deltas = np.diff(np.asarray(values, dtype=float))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(gains[:period].sum() / period)
    avg_loss = float(losses[:period].sum() / period)

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + float(gain)) / period
        avg_loss = (avg_loss * (period - 1) + float(loss)) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))
