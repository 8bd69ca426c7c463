"""Data normalization, cleaning and length validation"""

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

from config import BATCH_CONFIG
from utils.helpers import optional_float
from utils.logger import setup_logger
from .price_series import PriceBar, PriceSeries

logger = setup_logger(__name__)

REQUIRED_COLUMNS = ['Open', 'High', 'Low', 'Close', 'Volume']


def has_min_length(values: Sequence, required: int) -> bool:
    """True when a series holds at least `required` points"""
    return values is not None and len(values) >= required


class DataNormalizer:
    """Turn raw provider payloads into clean PriceSeries"""

    def __init__(self, min_bars: int = None):
        """Initialize normalizer"""
        self.min_bars = BATCH_CONFIG["MIN_BARS"] if min_bars is None else min_bars

    def normalize(self, df: pd.DataFrame, symbol: str, name: str = None) -> Optional[PriceSeries]:
        """
        Normalize an OHLCV DataFrame (yfinance layout) into a PriceSeries

        Rows without a close are dropped, missing open/high/low fall back to
        the close, missing volume to 0. Duplicated dates keep the last row.

        Args:
            df: Raw DataFrame indexed by date
            symbol: Ticker symbol
            name: Display name (defaults to symbol)

        Returns:
            PriceSeries or None when nothing usable remains
        """
        if df is None or df.empty:
            return None

        df = df.copy()

        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.droplevel(1)

        if not isinstance(df.index, pd.DatetimeIndex):
            if 'Date' in df.columns:
                df['Date'] = pd.to_datetime(df['Date'])
                df = df.set_index('Date')
            else:
                df.index = pd.to_datetime(df.index)

        missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing_cols:
            logger.warning(f"{symbol}: missing columns {missing_cols}")
            return None

        df = df[REQUIRED_COLUMNS].apply(pd.to_numeric, errors='coerce')
        df = df[df['Close'].notna()]
        df = df[~df.index.duplicated(keep='last')].sort_index()

        for col in ['Open', 'High', 'Low']:
            df[col] = df[col].fillna(df['Close'])
        df['Volume'] = df['Volume'].fillna(0)

        # Remove rows with impossible values
        df = df[(df[['Open', 'High', 'Low', 'Close']] >= 0).all(axis=1) & (df['Volume'] >= 0)]

        if df.empty:
            return None

        bars = tuple(
            PriceBar(
                date=timestamp.date(),
                open=float(row.Open),
                high=float(row.High),
                low=float(row.Low),
                close=float(row.Close),
                volume=float(row.Volume),
            )
            for timestamp, row in zip(df.index, df.itertuples(index=False))
        )

        logger.debug(f"Normalized {symbol}: {len(bars)} bars")
        return PriceSeries(symbol=symbol, name=name or symbol, bars=bars)

    def from_records(self, records: Iterable[Mapping], symbol: str, name: str = None) -> Optional[PriceSeries]:
        """
        Build a PriceSeries from dict rows {date, open, high, low, close, volume}

        Args:
            records: Iterable of bar mappings (date as ISO string, date or datetime)
            symbol: Ticker symbol
            name: Display name

        Returns:
            PriceSeries or None
        """
        rows = []
        for record in records:
            rows.append({
                'Date': _coerce_date(record.get('date')),
                'Open': optional_float(record.get('open')),
                'High': optional_float(record.get('high')),
                'Low': optional_float(record.get('low')),
                'Close': optional_float(record.get('close')),
                'Volume': optional_float(record.get('volume')),
            })

        rows = [row for row in rows if row['Date'] is not None]
        if not rows:
            return None

        return self.normalize(pd.DataFrame(rows), symbol, name)

    def is_usable(self, series: Optional[PriceSeries], min_bars: int = None) -> bool:
        """
        Check a series has enough bars to be scored

        Args:
            series: Normalized series (None counts as unusable)
            min_bars: Override of the configured minimum

        Returns:
            True if usable
        """
        required = self.min_bars if min_bars is None else min_bars
        if series is None or not isinstance(series, PriceSeries):
            return False
        if not has_min_length(series.bars, required):
            logger.debug(f"Insufficient history for {series.symbol}: {len(series)} < {required}")
            return False
        return True


def _coerce_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.Timestamp(value).date()
    except (TypeError, ValueError):
        return None
