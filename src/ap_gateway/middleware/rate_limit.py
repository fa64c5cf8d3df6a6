"""Bid submission rate limiting — fixed one-minute window per bidder.

Key pattern: "ratelimit:{user_id}:{group}". The Redis limiter uses
INCR + EXPIRE; the memory limiter (memory storage backend) keeps counters in
process. If Redis is unreachable the request is allowed and a warning logged.

Applied as a FastAPI dependency on POST /assets/{asset_id}/bids, keyed by the
authenticated bidder.
"""

import logging
import time
from typing import Protocol

from fastapi import Depends
from redis.exceptions import RedisError

from config.settings import settings
from src.ap_common.errors import RateLimitError
from src.ap_common.redis_client import get_redis
from src.ap_gateway.auth.dependencies import CurrentUser, require_buyer

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60


class RateLimiter(Protocol):
    async def hit(self, key: str, limit: int) -> bool:
        """Count one request; False once the window's limit is exceeded."""
        ...


class RedisRateLimiter:
    async def hit(self, key: str, limit: int) -> bool:
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except (RedisError, OSError):
            logger.warning("Rate limiter unavailable, allowing %s", key, exc_info=True)
            return True
        return count <= limit


class InMemoryRateLimiter:
    def __init__(self) -> None:
        self._window = int(time.monotonic() // _WINDOW_SECONDS)
        self._counts: dict[str, int] = {}

    async def hit(self, key: str, limit: int) -> bool:
        window = int(time.monotonic() // _WINDOW_SECONDS)
        if window != self._window:
            # Counters only ever belong to the current window.
            self._window = window
            self._counts.clear()
        count = self._counts.get(key, 0) + 1
        self._counts[key] = count
        return count <= limit

    def tracked_keys(self) -> int:
        return len(self._counts)


_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _limiter  # noqa: PLW0603
    if _limiter is None:
        _limiter = (
            InMemoryRateLimiter() if settings.STORAGE_BACKEND == "memory" else RedisRateLimiter()
        )
    return _limiter


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    global _limiter  # noqa: PLW0603
    _limiter = limiter


async def enforce_bid_rate_limit(
    current_user: CurrentUser = Depends(require_buyer),
) -> CurrentUser:
    key = f"ratelimit:{current_user.user_id}:bids"
    if not await get_rate_limiter().hit(key, settings.BID_RATE_LIMIT_PER_MINUTE):
        raise RateLimitError()
    return current_user
