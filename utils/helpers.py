"""Helper utility functions"""

import math
import time
import functools
from typing import Callable, Iterable, List, Optional
from decimal import Decimal, ROUND_HALF_UP


def format_percentage(value: float, decimals: int = 2) -> str:
    """
    Format a percentage value (already scaled to 0-100)

    Args:
        value: Percentage value
        decimals: Decimal places

    Returns:
        Formatted percentage string
    """
    return f"{value:.{decimals}f}%"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safe division with default on zero denominator

    Args:
        numerator: Numerator
        denominator: Denominator
        default: Default value if denominator is zero

    Returns:
        Division result or default
    """
    if denominator is None or denominator == 0:
        return default
    return numerator / denominator


def round_to_precision(value: float, precision: int = 2) -> float:
    """
    Round value to specified precision, halves away from zero

    Args:
        value: Value to round
        precision: Decimal places

    Returns:
        Rounded value
    """
    decimal = Decimal(str(value))
    rounded = decimal.quantize(
        Decimal(10) ** -precision,
        rounding=ROUND_HALF_UP
    )
    return float(rounded)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (Python's round() is banker's)"""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def is_number(value) -> bool:
    """True for real, finite-or-infinite numbers; False for None, NaN and non-numerics"""
    if value is None or isinstance(value, bool):
        return False
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def retry_on_failure(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator for retrying function calls on failure

    Args:
        max_retries: Maximum number of attempts
        delay: Initial delay between retries
        backoff: Backoff multiplier
        exceptions: Tuple of exceptions to catch
        sleep: Sleep function (injectable for tests)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions:
                    if attempt >= max_retries - 1:
                        raise
                    sleep(current_delay)
                    current_delay *= backoff

        return wrapper
    return decorator


def normalize_symbol(symbol: str) -> str:
    """Upper-case and strip a ticker symbol"""
    return (symbol or "").strip().upper()


def validate_ticker(ticker: str) -> bool:
    """
    Validate ticker format

    Args:
        ticker: Ticker symbol

    Returns:
        True if valid
    """
    if not ticker:
        return False
    # Letters/digits with the usual class and exchange separators (BRK-B, BRK.B, ^GSPC)
    core = ticker.replace("-", "").replace(".", "").replace("^", "")
    return core.isalnum() and len(ticker) <= 15


def unique_symbols(symbols: Iterable[str]) -> List[str]:
    """Normalize symbols and drop blanks/duplicates while preserving order"""
    seen = set()
    result = []
    for raw in symbols:
        symbol = normalize_symbol(raw)
        if symbol and symbol not in seen:
            seen.add(symbol)
            result.append(symbol)
    return result


def chunked(items: List, size: int) -> List[List]:
    """Split a list into consecutive groups of at most `size` items"""
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


def optional_float(value) -> Optional[float]:
    """float(value), or None for missing, NaN and non-numeric values"""
    return float(value) if is_number(value) else None
