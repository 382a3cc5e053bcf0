"""
Key-Value Store Interface
=========================
The primitives the OTP engines need from a shared store.

Every mutation on a key must go through one of these atomic calls. Callers
never build read-then-write sequences out of them.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract async key-value store with per-key TTL.

    Implementations raise ``StoreUnavailableError`` when the backing store
    cannot be reached or does not answer within its timeout.
    """

    name: str = "base"
    degraded: bool = False

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored at ``key`` or ``None``."""

    @abstractmethod
    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        only_if_absent: bool = False,
    ) -> bool:
        """
        Write ``value`` at ``key``.

        Args:
            key: Store key
            value: String value
            ttl: Lifetime in seconds, ``None`` for no expiry
            only_if_absent: Atomic conditional set; skip the write if the key exists

        Returns:
            True if the value was written
        """

    @abstractmethod
    async def incr(self, key: str, ttl_if_new: Optional[int] = None) -> int:
        """
        Atomically increment ``key``, creating it at 1.

        Args:
            key: Counter key
            ttl_if_new: Lifetime applied in the same atomic step when the
                increment creates the key

        Returns:
            The new value
        """

    @abstractmethod
    async def expire(self, key: str, ttl: int) -> bool:
        """Set the lifetime of an existing key. Returns False if the key is missing."""

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """Remaining lifetime in seconds; ``None`` if missing or without expiry."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys. Missing keys are ignored. Returns the number removed."""

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
