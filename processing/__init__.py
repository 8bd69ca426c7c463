"""Grouped async processing and rate limiting"""

from .rate_limiter import RateLimiter
from .batch_engine import BatchEngine, call_async

__all__ = ["RateLimiter", "BatchEngine", "call_async"]
