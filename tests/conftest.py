"""Shared fixtures: controllable clock, recording sender, scripted randomness."""

import asyncio
from typing import List, Optional, Tuple

import pytest

from mailverify_core.errors import SenderError, StoreUnavailableError
from mailverify_core.otp import OTPConfig, OTPIssuer, OTPVerifier, VerificationGate
from mailverify_core.otp.models import SendReceipt
from mailverify_core.senders import NotificationSender
from mailverify_core.store import InMemoryStore


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSender(NotificationSender):
    """Keeps every code it is asked to send. Fails on demand."""

    name = "recording"

    def __init__(self):
        self.sent: List[Tuple[str, str, int]] = []
        self.fail = False

    async def send_code(self, to: str, code: str, ttl_seconds: int) -> SendReceipt:
        if self.fail:
            raise SenderError("mailbox unavailable", provider=self.name, status_code=503)
        self.sent.append((to, code, ttl_seconds))
        return SendReceipt(provider=self.name, message_id=f"msg-{len(self.sent)}")

    @property
    def last_code(self) -> Optional[str]:
        return self.sent[-1][1] if self.sent else None


class ScriptedRandom:
    """Random source returning a fixed sequence of values."""

    def __init__(self, *values: int):
        self.values = list(values)
        self.calls: List[Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values.pop(0)


class FailingStore(InMemoryStore):
    """In-memory store whose selected operations raise StoreUnavailableError."""

    name = "failing"

    def __init__(self, *failing: str, clock=None):
        super().__init__(clock or FakeClock())
        self.failing = set(failing)

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise StoreUnavailableError("connection reset", operation=operation)

    async def get(self, key):
        self._check("get")
        return await super().get(key)

    async def set(self, key, value, ttl=None, only_if_absent=False):
        self._check("set")
        return await super().set(key, value, ttl=ttl, only_if_absent=only_if_absent)

    async def incr(self, key, ttl_if_new=None):
        self._check("incr")
        return await super().incr(key, ttl_if_new=ttl_if_new)

    async def exists(self, key):
        self._check("exists")
        return await super().exists(key)


class YieldingStore(InMemoryStore):
    """In-memory store that hands control back to the event loop before every operation."""

    name = "yielding"

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value, ttl=None, only_if_absent=False):
        await asyncio.sleep(0)
        return await super().set(key, value, ttl=ttl, only_if_absent=only_if_absent)

    async def incr(self, key, ttl_if_new=None):
        await asyncio.sleep(0)
        return await super().incr(key, ttl_if_new=ttl_if_new)

    async def ttl(self, key):
        await asyncio.sleep(0)
        return await super().ttl(key)

    async def delete(self, *keys):
        await asyncio.sleep(0)
        return await super().delete(*keys)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryStore:
    return InMemoryStore(clock=clock)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def config() -> OTPConfig:
    return OTPConfig(otp_ttl_seconds=600, cooldown_seconds=60, max_attempts=5)


@pytest.fixture
def issuer(store, sender, config) -> OTPIssuer:
    return OTPIssuer(store, sender, config)


@pytest.fixture
def verifier(store, config) -> OTPVerifier:
    return OTPVerifier(store, config)


@pytest.fixture
def gate(store, config) -> VerificationGate:
    return VerificationGate(store, config)
