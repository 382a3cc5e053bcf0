"""
Null Store
==========
Degraded strategy used when no shared store is available at process level.

It remembers nothing: cooldowns never block, attempt counters never grow and
no code can ever be verified. This is a security degradation and is logged
as one.
"""

from typing import Optional
import structlog

from .base import KeyValueStore

logger = structlog.get_logger(__name__)


class NullStore(KeyValueStore):
    """Store with no memory. Every write succeeds and every read misses."""

    name = "null"
    degraded = True

    def __init__(self, reason: str = "not configured"):
        self.reason = reason
        logger.warning(
            "otp_store_degraded",
            reason=reason,
            impact="cooldown and attempt limits disabled; verification unavailable",
        )

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        only_if_absent: bool = False,
    ) -> bool:
        return True

    async def incr(self, key: str, ttl_if_new: Optional[int] = None) -> int:
        return 1

    async def expire(self, key: str, ttl: int) -> bool:
        return False

    async def ttl(self, key: str) -> Optional[int]:
        return None

    async def delete(self, *keys: str) -> int:
        return 0
