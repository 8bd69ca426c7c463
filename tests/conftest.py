"""Shared fixtures for signal engine tests."""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import pytest

from data_cleaner.price_series import PriceBar, PriceSeries
from data_fetch.provider import ScreenerCandidate, ScreenerFilters
from fundamentals.fundamental_scorer import FundamentalMetrics
from indicators.indicator_engine import IndicatorSet
from processing.batch_engine import BatchEngine
from processing.rate_limiter import RateLimiter


def make_series(
    symbol: str,
    closes: Sequence[float],
    volumes: Optional[Sequence[float]] = None,
    name: Optional[str] = None,
) -> PriceSeries:
    """Daily series starting 2024-01-01 with open/high/low equal to the close."""
    volumes = volumes if volumes is not None else [1_000_000.0] * len(closes)
    start = date(2024, 1, 1)
    bars = tuple(
        PriceBar(
            date=start + timedelta(days=i),
            open=float(c),
            high=float(c),
            low=float(c),
            close=float(c),
            volume=float(v),
        )
        for i, (c, v) in enumerate(zip(closes, volumes))
    )
    return PriceSeries(symbol=symbol, name=name or symbol, bars=bars)


def rising(n: int = 60, start: float = 50.0, step: float = 1.0) -> List[float]:
    return [start + i * step for i in range(n)]


def falling(n: int = 60, start: float = 150.0, step: float = 1.0) -> List[float]:
    return [start - i * step for i in range(n)]


def make_indicators(**overrides) -> IndicatorSet:
    """Neutral snapshot: every scoring stage contributes 0 under both strategies."""
    values = dict(
        price=100.0,
        rsi=50.0,
        macd=0.0,
        macd_signal=0.0,
        histogram=0.0,
        sma20=100.0,
        sma50=100.0,
        sma200=100.0,
        ema12=100.0,
        ema26=100.0,
        volume_ratio=1.0,
        price_vs_sma50=0.0,
        price_vs_sma200=0.0,
    )
    values.update(overrides)
    return IndicatorSet(**values)


class FakeProvider:
    """In-memory MarketDataProvider; Exception values are raised on access."""

    def __init__(
        self,
        series: Dict[str, object] = None,
        metrics: Dict[str, object] = None,
        candidates: List[ScreenerCandidate] = None,
    ):
        self.series = series or {}
        self.metrics = metrics or {}
        self.candidates = candidates or []
        self.price_calls: List[str] = []
        self.metric_calls: List[str] = []
        self.screener_calls: List[ScreenerFilters] = []

    def get_price_history(self, symbol: str, lookback_days: int) -> Optional[PriceSeries]:
        self.price_calls.append(symbol)
        value = self.series.get(symbol)
        if isinstance(value, Exception):
            raise value
        return value

    def get_fundamental_metrics(self, symbol: str) -> Optional[FundamentalMetrics]:
        self.metric_calls.append(symbol)
        value = self.metrics.get(symbol)
        if isinstance(value, Exception):
            raise value
        return value

    def get_screener_candidates(self, filters: ScreenerFilters) -> List[ScreenerCandidate]:
        self.screener_calls.append(filters)
        return list(self.candidates)


class FakeClock:
    """Monotonic clock that only moves when told to (or when slept on)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records delays and advances a FakeClock."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.clock is not None:
            self.clock.advance(delay)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep(fake_clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(fake_clock)


@pytest.fixture
def instant_batch_engine(fake_clock: FakeClock, recording_sleep: RecordingSleep) -> BatchEngine:
    """Groups of 5 with a 0.3s limiter that never really sleeps."""
    return BatchEngine(
        batch_size=5,
        batch_delay=0.3,
        limiter_factory=lambda delay: RateLimiter(interval=delay, clock=fake_clock, sleep=recording_sleep),
    )
