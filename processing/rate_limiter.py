"""Async rate limiter for provider-bound work"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional


@dataclass
class RateLimiter:
    """
    Leaky-bucket limiter: one slot per `interval` seconds

    The first acquire passes immediately; each later acquire waits until
    `interval` has elapsed since the previous slot. Clock and sleep are
    injectable so callers can run without real delays.

    Attributes:
        interval: Minimum spacing between slots in seconds
        clock: Monotonic time source
        sleep: Coroutine function used to wait

    Example:
        limiter = RateLimiter(interval=0.3)
        await limiter.acquire()  # immediate
        await limiter.acquire()  # waits ~0.3s
    """

    interval: float = 0.3
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    waits: List[float] = field(default_factory=list)
    _next_slot: Optional[float] = None

    def __post_init__(self):
        if self.interval < 0:
            raise ValueError(f"interval must be non-negative, got {self.interval}")

    async def acquire(self) -> None:
        """
        Acquire the next slot, sleeping if it is not yet due
        """
        now = self.clock()
        if self._next_slot is not None and now < self._next_slot:
            delay = self._next_slot - now
            self.waits.append(delay)
            await self.sleep(delay)
            now = max(self.clock(), self._next_slot)
        self._next_slot = now + self.interval

    def reset(self) -> None:
        """Forget the previous slot and recorded waits."""
        self._next_slot = None
        self.waits.clear()
