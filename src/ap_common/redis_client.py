"""Redis client factory — bid rate limiting and notification pub/sub only.

NOT used for bid state: the asset row in PostgreSQL is the single source of
truth for the current highest bid. Pub/sub listeners hold connections open
for a long time, so the pool pings idle connections before reuse.
"""

import redis.asyncio as aioredis

from config.settings import settings

_HEALTH_CHECK_INTERVAL_SECONDS = 30

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=_HEALTH_CHECK_INTERVAL_SECONDS,
        )
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
