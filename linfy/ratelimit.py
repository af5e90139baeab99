"""Fixed-window request budget per client address."""

import asyncio
import logging
import time
from typing import Dict, Optional, Tuple

from .database.cache import RedisCache


class RateLimiter:
    """Allow ``max_requests`` per client per ``window_seconds`` window.

    Counters live in Redis when a connected cache is given, otherwise in
    process memory (per worker). A Redis failure lets the request through.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 900,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self._counters: Dict[Tuple[str, int], int] = {}
        self._current_window: Optional[int] = None
        self._lock = asyncio.Lock()

    def _window(self, now: float) -> int:
        return int(now // self.window_seconds)

    async def hit(self, client: str, now: Optional[float] = None) -> Tuple[bool, int, int]:
        """Count one request for a client.

        Args:
            client: Client address
            now: Current epoch seconds (defaults to time.time())

        Returns:
            Tuple of (allowed, remaining, seconds_until_reset)
        """
        now = time.time() if now is None else now
        window = self._window(now)
        reset_in = int((window + 1) * self.window_seconds - now) or 1

        if self.cache and self.cache.enabled:
            key = self.cache.get_cache_key("ratelimit", client, str(window))
            count = await self.cache.increment(key, self.window_seconds)
            if count is None:
                return True, self.max_requests, reset_in
        else:
            count = await self._increment_local(client, window)

        allowed = count <= self.max_requests
        if not allowed:
            self.logger.warning(f"Rate limit exceeded for {client} ({count} requests)")
        return allowed, max(self.max_requests - count, 0), reset_in

    async def _increment_local(self, client: str, window: int) -> int:
        async with self._lock:
            # Drop counters from past windows once per window change
            if window != self._current_window:
                self._counters = {k: v for k, v in self._counters.items() if k[1] >= window}
                self._current_window = window

            key = (client, window)
            self._counters[key] = self._counters.get(key, 0) + 1
            return self._counters[key]
