"""Token Bucket rate limiter for asyncio callers"""
import asyncio
import contextlib
from typing import Optional

from loguru import logger

from .token_bucket import DEFAULT_TICK_INTERVAL, validate_bucket_params


class AsyncTokenBucket:
    """Token bucket whose replenishment runs as a task on the current event loop"""

    def __init__(self, refill_rate: int, capacity: int, tick_interval: float = DEFAULT_TICK_INTERVAL):
        """
        Args:
            refill_rate: Tokens added per tick
            capacity: Maximum number of tokens
            tick_interval: Seconds between replenishment events

        Must be called from inside a running event loop.
        """
        validate_bucket_params(refill_rate, capacity, tick_interval)
        loop = asyncio.get_running_loop()

        self.refill_rate = refill_rate
        self.capacity = capacity
        self.tick_interval = float(tick_interval)

        self._tokens = capacity
        self._running = True
        self._lock = asyncio.Lock()
        self._task = loop.create_task(self._replenish_loop())

    @property
    def tokens(self) -> int:
        return self._tokens

    @property
    def running(self) -> bool:
        return self._running

    async def acquire(self) -> bool:
        """Take one token if available, without waiting for a refill"""
        async with self._lock:
            observed = self._tokens
            granted = observed > 0
            if granted:
                self._tokens -= 1
        logger.debug(f"Current tokens: {observed}")
        return granted

    async def wait_for_token(self, timeout: Optional[float] = None) -> bool:
        """Retry acquire until a token is granted or timeout expires"""
        poll_interval = min(self.tick_interval / 4, 0.05)
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            if await self.acquire():
                return True
            if deadline is None:
                if not self._running:
                    return False
                await asyncio.sleep(poll_interval)
                continue
            remaining = deadline - loop.time()
            if remaining <= 0:
                return False
            await asyncio.sleep(min(poll_interval, remaining))

    async def _replenish_loop(self):
        while True:
            await asyncio.sleep(self.tick_interval)
            async with self._lock:
                if self._tokens < self.capacity:
                    self._tokens = min(self.capacity, self._tokens + self.refill_rate)

    async def stop(self):
        """Cancel the replenishment task. Safe to call more than once."""
        async with self._lock:
            if not self._running:
                return
            self._running = False
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        logger.debug(f"AsyncTokenBucket stopped with {self._tokens} token(s) left")

    async def __aenter__(self) -> "AsyncTokenBucket":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
        return False
