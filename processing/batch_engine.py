"""Grouped async processing with a rate limiter between groups"""

import asyncio
import inspect
from typing import Any, Callable, List, Optional
from config import BATCH_CONFIG
from utils.helpers import chunked
from utils.logger import setup_logger
from .rate_limiter import RateLimiter

logger = setup_logger(__name__)


async def call_async(func: Callable, *args):
    """Await coroutine functions directly, run blocking ones in a worker thread"""
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    return await asyncio.to_thread(func, *args)


class BatchEngine:
    """Run per-item work in fixed-size concurrent groups"""

    def __init__(
        self,
        batch_size: int = None,
        batch_delay: float = None,
        limiter_factory: Callable[[float], RateLimiter] = None,
    ):
        """
        Initialize batch engine

        Args:
            batch_size: Items in flight per group
            batch_delay: Minimum spacing between group starts in seconds
            limiter_factory: Builds a fresh limiter per run from the delay
        """
        self.batch_size = batch_size or BATCH_CONFIG["BATCH_SIZE"]
        self.batch_delay = BATCH_CONFIG["BATCH_DELAY"] if batch_delay is None else batch_delay
        self.limiter_factory = limiter_factory or (lambda delay: RateLimiter(interval=delay))

        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    async def process(
        self,
        items: List[Any],
        process_func: Callable,
        limiter: Optional[RateLimiter] = None,
    ) -> List[Any]:
        """
        Process items group by group

        Items in a group run concurrently; blocking functions go through
        worker threads. Failed items (exception or None result) are dropped.

        Args:
            items: Work items, usually ticker symbols
            process_func: Sync or async function of one item
            limiter: Limiter to use (a new one per run by default)

        Returns:
            Successful results in input order
        """
        limiter = limiter or self.limiter_factory(self.batch_delay)
        groups = chunked(list(items), self.batch_size)
        results = []

        for index, group in enumerate(groups, start=1):
            await limiter.acquire()
            logger.debug(f"Processing group {index}/{len(groups)}: {group}")

            tasks = [call_async(process_func, item) for item in group]
            group_results = await asyncio.gather(*tasks, return_exceptions=True)

            for item, result in zip(group, group_results):
                if isinstance(result, Exception):
                    logger.warning(f"Dropped {item}: {result}")
                elif result is None:
                    logger.debug(f"Dropped {item}: no result")
                else:
                    results.append(result)

        logger.info(f"Processed {len(items)} items in {len(groups)} groups, {len(results)} succeeded")
        return results
