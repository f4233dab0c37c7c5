"""Shared Redis connection, created on first use.

Only the settlement run-lock lives in Redis. Auction and bid state is
always read from PostgreSQL under the row lock.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def close_redis() -> None:
    """Release the pool at shutdown; safe to call when never opened."""
    global _client  # noqa: PLW0603
    client, _client = _client, None
    if client is not None:
        await client.aclose()
