"""Technical indicator primitives"""

from .moving_average import sma, ema
from .oscillator import rsi
from .trend import macd, MACDResult
from .indicator_engine import IndicatorEngine, IndicatorSet

__all__ = ["sma", "ema", "rsi", "macd", "MACDResult", "IndicatorEngine", "IndicatorSet"]
