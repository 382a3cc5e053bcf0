"""
mailverify-core
===============
Email ownership verification with one-time passcodes.
"""

__version__ = "1.0.0"

# Configuration
from mailverify_core.config import Settings

# Errors
from mailverify_core.errors import (
    OTPError,
    ValidationError,
    Throttled,
    CodeExpired,
    InvalidCode,
    TooManyAttempts,
    NotVerified,
    ServiceUnavailable,
    SenderNotConfigured,
    DeliveryFailed,
)

# Store
from mailverify_core.store import (
    KeyValueStore,
    InMemoryStore,
    NullStore,
    RedisStore,
    create_store,
)

# OTP
from mailverify_core.otp import (
    GatePolicy,
    OTPConfig,
    IssueResult,
    VerifyResult,
    SendReceipt,
    CodeGenerator,
    generate_code,
    OTPIssuer,
    OTPVerifier,
    VerificationGate,
)

# Senders
from mailverify_core.senders import NotificationSender, ResendEmailSender

__all__ = [
    # Configuration
    "Settings",
    # Errors
    "OTPError",
    "ValidationError",
    "Throttled",
    "CodeExpired",
    "InvalidCode",
    "TooManyAttempts",
    "NotVerified",
    "ServiceUnavailable",
    "SenderNotConfigured",
    "DeliveryFailed",
    # Store
    "KeyValueStore",
    "InMemoryStore",
    "NullStore",
    "RedisStore",
    "create_store",
    # OTP
    "GatePolicy",
    "OTPConfig",
    "IssueResult",
    "VerifyResult",
    "SendReceipt",
    "CodeGenerator",
    "generate_code",
    "OTPIssuer",
    "OTPVerifier",
    "VerificationGate",
    # Senders
    "NotificationSender",
    "ResendEmailSender",
]
