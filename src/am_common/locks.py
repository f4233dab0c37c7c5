"""Redis run-lock: at most one holder per key across all processes.

SET NX PX acquires with an expiry so a crashed holder cannot wedge the key;
release is a compare-and-delete Lua script so a holder whose TTL lapsed
never deletes a lock re-acquired by someone else.
"""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

_UNLOCK_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
else
    return 0
end
"""


class RedisRunLock:
    def __init__(self, redis: aioredis.Redis, key: str, ttl_ms: int) -> None:
        self._redis = redis
        self._key = key
        self._ttl_ms = ttl_ms

    async def acquire(self) -> str | None:
        """Return an owner token, or None if another holder has the lock."""
        token = uuid.uuid4().hex
        acquired = await self._redis.set(self._key, token, nx=True, px=self._ttl_ms)
        return token if acquired else None

    async def release(self, token: str) -> None:
        try:
            await self._redis.eval(_UNLOCK_SCRIPT, 1, self._key, token)
        except RedisError:
            # TTL expiry frees the key anyway
            logger.warning("Failed to release run-lock %s", self._key, exc_info=True)

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[bool]:
        """Yield True while holding the lock, False if it was already taken."""
        token = await self.acquire()
        if token is None:
            yield False
            return
        try:
            yield True
        finally:
            await self.release(token)
