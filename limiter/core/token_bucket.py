"""Token Bucket rate limiter with a background replenishment thread"""
import math
import threading
import time
from typing import Optional

from loguru import logger

DEFAULT_TICK_INTERVAL = 1.0  # seconds


def validate_bucket_params(refill_rate: int, capacity: int, tick_interval: float):
    """Reject bucket settings that would break the 0 <= tokens <= capacity invariant"""
    for name, value in (("refill_rate", refill_rate), ("capacity", capacity)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")
    if isinstance(tick_interval, bool) or not isinstance(tick_interval, (int, float)):
        raise ValueError(f"tick_interval must be a number, got {tick_interval!r}")
    if not math.isfinite(tick_interval) or tick_interval <= 0:
        raise ValueError(f"tick_interval must be positive and finite, got {tick_interval}")
    if tick_interval > threading.TIMEOUT_MAX:
        raise ValueError(f"tick_interval must not exceed {threading.TIMEOUT_MAX}, got {tick_interval}")


class TokenBucket:
    """Token bucket algorithm for rate limiting.

    The bucket starts full. A daemon thread adds ``refill_rate`` tokens every
    ``tick_interval`` seconds, never going above ``capacity``. Callers poll
    with :meth:`try_acquire`, which never blocks waiting for tokens.
    """

    def __init__(self, refill_rate: int, capacity: int, tick_interval: float = DEFAULT_TICK_INTERVAL):
        """
        Args:
            refill_rate: Tokens added per tick
            capacity: Maximum number of tokens
            tick_interval: Seconds between replenishment events
        """
        validate_bucket_params(refill_rate, capacity, tick_interval)

        self.refill_rate = refill_rate
        self.capacity = capacity
        self.tick_interval = float(tick_interval)

        self._tokens = capacity
        self._running = True
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._replenish_loop,
            name=f"token-bucket-refill-{id(self):x}",
            daemon=True,
        )
        self._thread.start()
        logger.debug(
            f"TokenBucket started (rate={refill_rate}/tick, capacity={capacity}, "
            f"tick={self.tick_interval}s)"
        )

    @classmethod
    def from_config(cls, cfg=None) -> "TokenBucket":
        """Build a bucket from the `limiter` section of the configuration"""
        if cfg is None:
            from ..utils.config import config as cfg
        settings = cfg.bucket_settings()
        return cls(settings["refill_rate"], settings["capacity"], settings["tick_interval"])

    @property
    def tokens(self) -> int:
        with self._lock:
            return self._tokens

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def try_acquire(self) -> bool:
        """Take one token if available. Returns immediately either way."""
        with self._lock:
            observed = self._tokens
            granted = observed > 0
            if granted:
                self._tokens -= 1
        logger.debug(f"Current tokens: {observed}")
        return granted

    def wait_for_token(self, timeout: Optional[float] = None, poll_interval: Optional[float] = None) -> bool:
        """Retry try_acquire until a token is granted or timeout expires.

        Sleeps happen outside the lock, so waiting callers never hold up the
        replenishment thread. Once the bucket is stopped and empty this can
        only return False after the timeout; without a timeout it returns
        False straight away in that case.
        """
        if poll_interval is None:
            poll_interval = min(self.tick_interval / 4, 0.05)
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            if self.try_acquire():
                return True
            if deadline is None:
                if not self.running:
                    return False
                wait_time = poll_interval
            else:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                wait_time = min(poll_interval, remaining)
            time.sleep(wait_time)

    def _refill(self):
        """Add one tick worth of tokens, clamped at capacity"""
        with self._lock:
            if self._running and self._tokens < self.capacity:
                self._tokens = min(self.capacity, self._tokens + self.refill_rate)

    def _replenish_loop(self):
        # Event.wait returns True as soon as stop() sets it
        while not self._stop_event.wait(self.tick_interval):
            self._refill()

    def stop(self):
        """Stop replenishment permanently. Safe to call more than once."""
        with self._lock:
            if not self._running:
                return
            self._running = False
        self._stop_event.set()
        if threading.current_thread() is not self._thread:
            self._thread.join()
        logger.debug(f"TokenBucket stopped with {self.tokens} token(s) left")

    def __enter__(self) -> "TokenBucket":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def __repr__(self) -> str:
        state = "active" if self.running else "stopped"
        return (
            f"TokenBucket(refill_rate={self.refill_rate}, capacity={self.capacity}, "
            f"tick_interval={self.tick_interval}, tokens={self.tokens}, {state})"
        )
