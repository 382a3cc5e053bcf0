"""
Notification Senders
====================
Delivery of OTP codes to an email address.

The engines only depend on ``NotificationSender``. ``ResendEmailSender`` is
the production adapter for the Resend REST API.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
import structlog

from .errors import SenderError
from .otp.models import SendReceipt
from .validation import mask_email

logger = structlog.get_logger(__name__)

OTP_SUBJECT = "Your verification code"


def render_otp_text(code: str, ttl_seconds: int) -> str:
    minutes = ttl_seconds // 60
    return f"Your verification code is: {code}\n\nThis code expires in {minutes} minutes."


def render_otp_html(code: str, ttl_seconds: int) -> str:
    minutes = ttl_seconds // 60
    return (
        '<div style="font-family:Arial,Helvetica,sans-serif;line-height:1.4;color:#111">'
        '<h2 style="color:#2b6cb0">Your verification code</h2>'
        f"<p>Use the code below to verify your email address. It expires in {minutes} minutes.</p>"
        '<div style="margin:20px 0;padding:16px;background:#f4f6fb;border-radius:8px;display:inline-block;">'
        f'<strong style="font-size:20px;letter-spacing:2px;color:#111">{code}</strong>'
        "</div>"
        '<p style="color:#666;margin-top:12px">If you did not request this, you can safely ignore this email.</p>'
        "</div>"
    )


class NotificationSender(ABC):
    """Delivers a code to an address. Raises ``SenderError`` on failure."""

    name: str = "base"

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def send_code(self, to: str, code: str, ttl_seconds: int) -> SendReceipt:
        """
        Send a verification code.

        Args:
            to: Destination email address
            code: The passcode
            ttl_seconds: Code lifetime, quoted in the message body

        Returns:
            SendReceipt from the provider
        """


class ResendEmailSender(NotificationSender):
    """
    Resend email adapter.

    Sends are never retried: a timed-out request may already have been
    accepted, and a duplicate email is worse than a visible failure.
    """

    name = "resend"

    def __init__(
        self,
        api_key: str,
        from_address: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def initialize(self) -> None:
        """Create the HTTP client with auth."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        logger.info("sender_initialized", provider=self.name)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _payload(self, to: str, code: str, ttl_seconds: int) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "to": [to],
            "subject": OTP_SUBJECT,
            "text": render_otp_text(code, ttl_seconds),
            "html": render_otp_html(code, ttl_seconds),
        }

    async def send_code(self, to: str, code: str, ttl_seconds: int) -> SendReceipt:
        if self._client is None:
            await self.initialize()

        try:
            response = await self._client.post("/emails", json=self._payload(to, code, ttl_seconds))
        except httpx.HTTPError as e:
            logger.error("otp_email_send_failed", provider=self.name, to=mask_email(to), error=str(e))
            raise SenderError(f"Request failed: {e}", provider=self.name) from e

        if response.status_code >= 400:
            logger.error(
                "otp_email_rejected",
                provider=self.name,
                to=mask_email(to),
                status_code=response.status_code,
            )
            raise SenderError("Provider rejected message", provider=self.name, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("otp_email_bad_response", provider=self.name, status_code=response.status_code)
            raise SenderError("Unreadable provider response", provider=self.name, status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise SenderError("Unexpected provider response", provider=self.name, status_code=response.status_code)

        logger.info("otp_email_sent", provider=self.name, to=mask_email(to), message_id=data.get("id"))
        return SendReceipt(provider=self.name, message_id=data.get("id"), raw_response=data)


def create_sender(settings) -> Optional[NotificationSender]:
    """Return the configured sender, or ``None`` when no API key is set."""
    if not settings.resend_api_key:
        logger.warning("sender_not_configured", provider=ResendEmailSender.name)
        return None
    return ResendEmailSender(
        api_key=settings.resend_api_key,
        from_address=settings.otp_from,
        base_url=settings.resend_api_url,
    )
