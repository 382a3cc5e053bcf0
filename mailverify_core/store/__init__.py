"""
OTP State Store
===============
Store interface, strategies and start-up selection.
"""

import structlog

from ..config import Settings
from ..errors import StoreUnavailableError
from .base import KeyValueStore
from .memory import InMemoryStore
from .null import NullStore
from .redis_store import RedisStore
from . import keys

logger = structlog.get_logger(__name__)


async def create_store(settings: Settings) -> KeyValueStore:
    """
    Pick the store strategy at process start-up.

    Redis is used when configured and reachable. Otherwise the service runs
    on ``NullStore``: issuance keeps working without cooldowns or attempt
    limits and verification is refused.
    """
    if not settings.redis_configured:
        return NullStore(reason="REDIS_URL or REDIS_HOST/REDIS_PASSWORD not set")

    store = RedisStore.from_settings(settings)
    try:
        await store.ping()
    except StoreUnavailableError as e:
        await store.close()
        return NullStore(reason=f"redis unreachable at start-up: {e}")

    logger.info("otp_store_connected", store=store.name)
    return store


__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "NullStore",
    "RedisStore",
    "create_store",
    "keys",
]
