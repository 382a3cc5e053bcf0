"""
OTP Issuance
============
Cooldown-guarded code issuance.
"""

from typing import TYPE_CHECKING, Callable, Optional
import structlog

from ..errors import (
    DeliveryFailed,
    SenderError,
    SenderNotConfigured,
    ServiceUnavailable,
    StoreUnavailableError,
    Throttled,
)
from ..store import keys
from ..store.base import KeyValueStore
from ..validation import mask_email, normalize_email
from .generator import CodeGenerator
from .models import IssueResult, OTPConfig

if TYPE_CHECKING:
    from ..senders import NotificationSender

logger = structlog.get_logger(__name__)


class OTPIssuer:
    """
    Issues one pending code per address.

    The cooldown marker is claimed with a single atomic conditional set, so
    concurrent requests for the same address race safely: exactly one wins.
    Delivery failure does not roll back the stored state; a retry stays
    throttled until the cooldown expires.
    """

    def __init__(
        self,
        store: KeyValueStore,
        sender: Optional["NotificationSender"],
        config: Optional[OTPConfig] = None,
        generate: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.sender = sender
        self.config = config or OTPConfig()
        self.generate = generate or CodeGenerator()

    async def _retry_after(self, email: str) -> Optional[int]:
        try:
            return await self.store.ttl(keys.cooldown_key(email))
        except StoreUnavailableError:
            return None

    async def issue(self, email: str) -> IssueResult:
        """
        Issue a fresh code for ``email`` and hand it to the sender.

        Raises:
            ValidationError: malformed address (before any store access)
            SenderNotConfigured: no sender available
            Throttled: cooldown window still active
            ServiceUnavailable: store unreachable
            DeliveryFailed: sender failed after state was written
        """
        email = normalize_email(email)
        if self.sender is None:
            raise SenderNotConfigured()

        cfg = self.config
        try:
            claimed = await self.store.set(
                keys.cooldown_key(email),
                keys.SENTINEL,
                ttl=cfg.cooldown_seconds,
                only_if_absent=True,
            )
            if not claimed:
                retry_after = await self._retry_after(email)
                logger.info("otp_issue_throttled", email=mask_email(email), retry_after=retry_after)
                raise Throttled(retry_after=retry_after)

            code = self.generate()
            await self.store.set(keys.otp_key(email), code, ttl=cfg.otp_ttl_seconds)
            await self.store.delete(keys.attempts_key(email))
        except StoreUnavailableError as e:
            logger.error("otp_issue_store_failed", email=mask_email(email), operation=e.operation)
            raise ServiceUnavailable() from e

        if self.store.degraded:
            logger.warning(
                "otp_issued_without_store",
                email=mask_email(email),
                store=self.store.name,
                impact="no cooldown, no attempt limit, code cannot be verified",
            )

        try:
            receipt = await self.sender.send_code(email, code, cfg.otp_ttl_seconds)
        except SenderError as e:
            logger.error("otp_delivery_failed", email=mask_email(email), provider=e.provider)
            raise DeliveryFailed() from e

        logger.info("otp_issued", email=mask_email(email), expires_in=cfg.otp_ttl_seconds)
        return IssueResult(
            email=email,
            expires_in=cfg.otp_ttl_seconds,
            receipt=receipt,
            degraded=self.store.degraded,
        )
