"""
OTP Verification
================
Attempt-bounded code verification and the verified latch.
"""

from typing import Any, Optional
import structlog

from ..errors import (
    CodeExpired,
    InvalidCode,
    ServiceUnavailable,
    StoreUnavailableError,
    TooManyAttempts,
    ValidationError,
)
from ..store import keys
from ..store.base import KeyValueStore
from ..validation import mask_email, normalize_email
from .models import OTPConfig, VerifyResult

logger = structlog.get_logger(__name__)


def _submitted(code: Any) -> str:
    if code is None or isinstance(code, bool):
        raise ValidationError("Missing email or code")
    value = str(code).strip()
    if not value:
        raise ValidationError("Missing email or code")
    return value


class OTPVerifier:
    """
    Checks submitted codes against the pending code for an address.

    Every call counts as an attempt, and the count is checked before the
    code is compared. Once the budget is spent even the correct code is
    refused until a new one is issued.
    """

    def __init__(self, store: KeyValueStore, config: Optional[OTPConfig] = None):
        self.store = store
        self.config = config or OTPConfig()

    async def _count_attempt(self, email: str) -> int:
        # The counter must never outlive the code it guards
        remaining = await self.store.ttl(keys.otp_key(email))
        return await self.store.incr(
            keys.attempts_key(email),
            ttl_if_new=remaining or self.config.otp_ttl_seconds,
        )

    async def _mark_verified(self, email: str) -> None:
        await self.store.delete(keys.otp_key(email), keys.attempts_key(email))
        await self.store.set(
            keys.verified_key(email),
            keys.SENTINEL,
            ttl=self.config.verified_ttl_seconds,
        )

    async def verify(self, email: Any, code: Any) -> VerifyResult:
        """
        Verify ``code`` for ``email``.

        Raises:
            ValidationError: missing or malformed input
            ServiceUnavailable: store degraded or unreachable
            CodeExpired: no pending code
            TooManyAttempts: attempt budget exceeded
            InvalidCode: code mismatch
        """
        if email is None or code is None:
            raise ValidationError("Missing email or code")
        email = normalize_email(email)
        submitted = _submitted(code)

        if self.store.degraded:
            logger.error("otp_verify_without_store", email=mask_email(email), store=self.store.name)
            raise ServiceUnavailable("Verification is temporarily unavailable")

        try:
            stored = await self.store.get(keys.otp_key(email))
            if stored is None:
                logger.info("otp_verify_no_pending_code", email=mask_email(email))
                raise CodeExpired()

            attempts = await self._count_attempt(email)
            if attempts > self.config.max_attempts:
                logger.warning("otp_verify_attempts_exceeded", email=mask_email(email), attempts=attempts)
                raise TooManyAttempts()

            if stored != submitted:
                remaining = self.config.max_attempts - attempts
                logger.info("otp_verify_mismatch", email=mask_email(email), attempts_remaining=remaining)
                raise InvalidCode(attempts_remaining=remaining)

            await self._mark_verified(email)
        except StoreUnavailableError as e:
            logger.error("otp_verify_store_failed", email=mask_email(email), operation=e.operation)
            raise ServiceUnavailable() from e

        logger.info("otp_verified", email=mask_email(email))
        return VerifyResult(email=email)
