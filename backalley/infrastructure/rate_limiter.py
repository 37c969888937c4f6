"""Client Rate Limiter: per-caller request gate in front of auth and posting routes.

Invariants:
    - Each key may make `limit` requests within any moving window of `period_seconds`
    - hit() records the request and returns True, or returns False without recording it
    - Limiters sharing a storage are namespaced by their name
    - State is per-process; this is abuse mitigation, not a correctness guarantee

Design Decisions:
    - Counting and expiry are delegated to `limits` (async MemoryStorage and the
      moving-window strategy), the engine behind flask-limiter
"""

import logging
import math
import time

from limits import RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage, Storage
from limits.aio.strategies import MovingWindowRateLimiter

logger = logging.getLogger(__name__)


class ClientRateLimiter:
    """Moving-window limit keyed by caller identity."""

    def __init__(
        self,
        name: str,
        limit: int,
        period_seconds: int,
        storage: Storage | None = None,
    ):
        if limit <= 0 or period_seconds <= 0:
            raise ValueError("limit and period_seconds must be positive")
        self.name = name
        self.item = RateLimitItemPerSecond(limit, period_seconds)
        self._strategy = MovingWindowRateLimiter(storage or MemoryStorage())

    async def hit(self, key: str) -> bool:
        if await self._strategy.hit(self.item, self.name, key):
            return True
        logger.info(
            "Rate limit exceeded",
            extra={"limiter": self.name, "client": key},
        )
        return False

    async def retry_after_ms(self, key: str) -> int:
        """Milliseconds until `key` may make one more request."""
        stats = await self._strategy.get_window_stats(self.item, self.name, key)
        if stats.remaining > 0:
            return 0
        return max(0, math.ceil((stats.reset_time - time.time()) * 1000))

    async def clear(self, key: str) -> None:
        await self._strategy.clear(self.item, self.name, key)
