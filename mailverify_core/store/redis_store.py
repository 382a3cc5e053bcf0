"""
Redis Store
===========
Production store backed by ``redis.asyncio``.

Atomicity comes from Redis itself: ``SET NX EX`` for conditional writes and
``INCR`` for counters. A socket timeout bounds every call; any Redis error,
timeouts included, is raised as ``StoreUnavailableError``.
"""

import logging
from typing import Any, Awaitable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import Settings
from ..errors import StoreUnavailableError
from .base import KeyValueStore

logger = structlog.get_logger(__name__)

# Only idempotent reads are retried. Writes, increments and deletes are not:
# a timed-out write may or may not have been applied.
_read_retry = retry(
    retry=retry_if_exception_type(StoreUnavailableError),
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=0.05, max=0.5),
    before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    reraise=True,
)

# INCR and the first EXPIRE run as one script so a new counter can never
# be left without a lifetime
INCR_WITH_TTL_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
local ttl = tonumber(ARGV[1])
if count == 1 and ttl > 0 then
    redis.call('EXPIRE', KEYS[1], ttl)
end
return count
"""


class RedisStore(KeyValueStore):
    """Async Redis implementation of the store interface."""

    name = "redis"

    def __init__(self, redis_client: redis.Redis):
        """
        Args:
            redis_client: Async Redis client created with ``decode_responses=True``
        """
        self.redis = redis_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisStore":
        """Build a client from either ``REDIS_URL`` or the host/password settings."""
        timeout = settings.redis_timeout_seconds
        if settings.redis_url:
            client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )
        else:
            client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                username=settings.redis_username,
                password=settings.redis_password,
                ssl=settings.redis_tls,
                decode_responses=True,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )
        return cls(client)

    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except (RedisError, OSError) as e:
            logger.error("redis_call_failed", operation=operation, error=str(e))
            raise StoreUnavailableError(str(e), operation=operation) from e

    @_read_retry
    async def get(self, key: str) -> Optional[str]:
        return await self._call("get", self.redis.get(key))

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        only_if_absent: bool = False,
    ) -> bool:
        result = await self._call(
            "set",
            self.redis.set(key, value, ex=ttl, nx=only_if_absent),
        )
        # SET NX answers None when the key already existed
        return bool(result)

    async def incr(self, key: str, ttl_if_new: Optional[int] = None) -> int:
        if not ttl_if_new:
            return int(await self._call("incr", self.redis.incr(key)))
        count = await self._call(
            "incr",
            self.redis.eval(INCR_WITH_TTL_SCRIPT, 1, key, ttl_if_new),
        )
        return int(count)

    async def expire(self, key: str, ttl: int) -> bool:
        return bool(await self._call("expire", self.redis.expire(key, ttl)))

    @_read_retry
    async def ttl(self, key: str) -> Optional[int]:
        remaining = await self._call("ttl", self.redis.ttl(key))
        # -2: missing key, -1: no expiry
        return int(remaining) if remaining is not None and remaining >= 0 else None

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._call("delete", self.redis.delete(*keys)))

    @_read_retry
    async def exists(self, key: str) -> bool:
        return bool(await self._call("exists", self.redis.exists(key)))

    async def ping(self) -> bool:
        return bool(await self._call("ping", self.redis.ping()))

    async def close(self) -> None:
        await self.redis.aclose()
