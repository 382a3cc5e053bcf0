"""
Verification Gate
=================
Read-only check of the verified marker for downstream actions.
"""

from typing import Optional
import structlog

from ..errors import NotVerified, StoreUnavailableError, ValidationError
from ..store import keys
from ..store.base import KeyValueStore
from ..validation import mask_email, normalize_email
from .models import GatePolicy, OTPConfig

logger = structlog.get_logger(__name__)


class VerificationGate:
    """
    Answers whether an address has completed OTP verification.

    When the store cannot answer (degraded strategy or unreachable), the
    configured ``GatePolicy`` decides, identically at every call site.
    """

    def __init__(self, store: KeyValueStore, config: Optional[OTPConfig] = None):
        self.store = store
        self.policy = (config or OTPConfig()).gate_policy

    def _unavailable(self, email: str, reason: str) -> bool:
        allowed = self.policy == GatePolicy.FAIL_OPEN
        log = logger.warning if allowed else logger.error
        log(
            "verification_gate_store_unavailable",
            email=mask_email(email),
            reason=reason,
            policy=self.policy.value,
            allowed=allowed,
        )
        return allowed

    async def is_verified(self, email: str) -> bool:
        """True if ``email`` holds the verified marker. Malformed addresses are never verified."""
        try:
            email = normalize_email(email)
        except ValidationError:
            return False
        if self.store.degraded:
            return self._unavailable(email, f"{self.store.name} store")
        try:
            return await self.store.exists(keys.verified_key(email))
        except StoreUnavailableError as e:
            return self._unavailable(email, e.operation)

    async def ensure_verified(self, email: str) -> str:
        """
        Guard for downstream senders.

        Returns:
            The normalized address

        Raises:
            NotVerified: the address has not been verified
        """
        email = normalize_email(email)
        if not await self.is_verified(email):
            logger.info("verification_gate_denied", email=mask_email(email))
            raise NotVerified()
        return email
