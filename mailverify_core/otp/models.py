"""
OTP Models
==========
Configuration and result types for issuance and verification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..config import Settings


class GatePolicy(str, Enum):
    """What the verification gate answers when the store is unavailable."""
    FAIL_CLOSED = "fail_closed"
    FAIL_OPEN = "fail_open"


@dataclass
class OTPConfig:
    """Lifecycle limits shared by the issuer, verifier and gate."""
    otp_ttl_seconds: int = 600
    cooldown_seconds: int = 60
    max_attempts: int = 5
    verified_ttl_seconds: Optional[int] = None
    gate_policy: GatePolicy = GatePolicy.FAIL_CLOSED

    @classmethod
    def from_settings(cls, settings: Settings) -> "OTPConfig":
        return cls(
            otp_ttl_seconds=settings.otp_ttl_seconds,
            cooldown_seconds=settings.cooldown_seconds,
            max_attempts=settings.max_verify_attempts,
            verified_ttl_seconds=settings.verified_ttl_seconds,
            gate_policy=GatePolicy.FAIL_OPEN if settings.gate_fail_open else GatePolicy.FAIL_CLOSED,
        )


@dataclass
class SendReceipt:
    """What a notification sender reports after accepting a message."""
    provider: str
    message_id: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "id": self.message_id}


@dataclass
class IssueResult:
    """Outcome of a successful issuance."""
    email: str
    expires_in: int
    receipt: SendReceipt
    degraded: bool = False


@dataclass
class VerifyResult:
    """Outcome of a successful verification."""
    email: str
    verified: bool = True
