"""
In-Memory Store
===============
Single-process store with TTL semantics for development and testing.
"""

import math
import time
from typing import Callable, Dict, Optional, Tuple

from .base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """
    Dict-backed store honouring per-key expiry.

    For development and testing only. State is not shared between processes;
    use RedisStore in production.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Monotonic time source in seconds (tests inject a fake one)
        """
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def _live(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return entry

    def _deadline(self, ttl: Optional[int]) -> Optional[float]:
        return None if ttl is None else self._clock() + ttl

    async def get(self, key: str) -> Optional[str]:
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        only_if_absent: bool = False,
    ) -> bool:
        if only_if_absent and self._live(key) is not None:
            return False
        self._data[key] = (str(value), self._deadline(ttl))
        return True

    async def incr(self, key: str, ttl_if_new: Optional[int] = None) -> int:
        entry = self._live(key)
        if entry is None:
            count, expires_at = 1, self._deadline(ttl_if_new)
        else:
            count, expires_at = int(entry[0]) + 1, entry[1]
        self._data[key] = (str(count), expires_at)
        return count

    async def expire(self, key: str, ttl: int) -> bool:
        entry = self._live(key)
        if entry is None:
            return False
        self._data[key] = (entry[0], self._deadline(ttl))
        return True

    async def ttl(self, key: str) -> Optional[int]:
        entry = self._live(key)
        if entry is None or entry[1] is None:
            return None
        return max(1, math.ceil(entry[1] - self._clock()))

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    def clear(self) -> None:
        self._data.clear()
