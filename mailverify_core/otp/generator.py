"""
OTP Code Generator
==================
Six-digit numeric codes from a swappable random source.
"""

import random
import secrets
from typing import Optional, Protocol

CODE_MIN = 100000
CODE_MAX = 999999


class RandomSource(Protocol):
    """Anything exposing ``randint(a, b)`` inclusive on both ends."""

    def randint(self, a: int, b: int) -> int:
        ...


_default_source: RandomSource = random.Random()


def default_source(secure: bool = False) -> RandomSource:
    """
    Return the random source for code generation.

    The default is ``random.Random``, which is not cryptographically secure.
    That is accepted for short-lived, rate-limited codes; pass ``secure=True``
    to use the OS CSPRNG instead.
    """
    return secrets.SystemRandom() if secure else _default_source


def generate_code(rng: Optional[RandomSource] = None) -> str:
    """Generate a 6-digit code in [100000, 999999]."""
    source = rng or _default_source
    return str(source.randint(CODE_MIN, CODE_MAX))


class CodeGenerator:
    """Callable wrapper so engines can hold a generator bound to one source."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or _default_source

    def __call__(self) -> str:
        return generate_code(self.rng)
