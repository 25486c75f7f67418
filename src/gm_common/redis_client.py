"""Redis access, used for request rate limiting only.

Inventory and order state never live in Redis; PostgreSQL is the single
source of truth for both. The pool is created on first use, so the API
starts (and fails open on rate limiting) when Redis is down.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
    return _redis_pool


async def incr_window(key: str, window_seconds: int) -> int:
    """Increment a fixed-window counter; the window opens on the first hit."""
    redis = await get_redis()
    count = int(await redis.incr(key))
    if count == 1:
        await redis.expire(key, window_seconds)
    return count


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
