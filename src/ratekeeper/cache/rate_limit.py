"""
Per-provider request counters and block-until timestamps.

Counters use tumbling windows (window index = floor(now / period)), an accepted
approximation of a sliding window.
"""

import logging
import time
from typing import Callable

from ratekeeper.cache.backend import CacheBackend

logger = logging.getLogger(__name__)


class RateLimitCache:
    def __init__(self, backend: CacheBackend, clock: Callable[[], float] = time.time):
        self._backend = backend
        self._clock = clock

    def _counter_key(self, provider_id: int, period: int) -> str:
        window = int(self._clock() // period) if period > 0 else 0
        return f"rate_limit_{provider_id}_{window}"

    @staticmethod
    def _block_key(provider_id: int) -> str:
        return f"rate_limit_block_{provider_id}"

    def get_request_count(self, provider_id: int, period: int) -> int:
        """Requests made in the current window."""
        return self._backend.get(self._counter_key(provider_id, period)) or 0

    def increment(self, provider_id: int, period: int) -> int:
        """
        Count one request. Providers without a limit period are not tracked.

        Returns:
            The new count for the current window (0 when untracked).
        """
        if period <= 0:
            return 0
        key = self._counter_key(provider_id, period)
        count = (self._backend.get(key) or 0) + 1
        self._backend.set(key, count, ttl=period * 2)
        return count

    def block(self, provider_id: int, seconds: int) -> None:
        """Stop calling the provider for `seconds`."""
        seconds = max(int(seconds), 1)
        blocked_until = self._clock() + seconds
        self._backend.set(self._block_key(provider_id), blocked_until, ttl=seconds)
        logger.warning(f"Provider {provider_id} blocked for {seconds}s")

    def get_blocked_until(self, provider_id: int) -> float | None:
        """Unix timestamp the block lasts until, or None when not blocked."""
        blocked_until = self._backend.get(self._block_key(provider_id))
        if blocked_until is None or blocked_until <= self._clock():
            return None
        return blocked_until
