"""Immutable price history value types"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Tuple

import numpy as np


@dataclass(frozen=True)
class PriceBar:
    """One daily OHLCV bar"""
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> Dict:
        return {
            'date': self.date.isoformat(),
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume,
        }


@dataclass(frozen=True)
class PriceSeries:
    """Chronologically ordered bars for one symbol, supplied whole per request"""
    symbol: str
    name: str
    bars: Tuple[PriceBar, ...]

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def closes(self) -> np.ndarray:
        return np.array([bar.close for bar in self.bars], dtype=float)

    @property
    def volumes(self) -> np.ndarray:
        return np.array([bar.volume for bar in self.bars], dtype=float)

    @property
    def latest(self) -> PriceBar:
        return self.bars[-1]
