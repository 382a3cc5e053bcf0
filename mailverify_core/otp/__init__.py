"""
OTP Lifecycle
=============
Code generation, issuance, verification and the verification gate.
"""

from .models import GatePolicy, OTPConfig, IssueResult, VerifyResult, SendReceipt
from .generator import CodeGenerator, RandomSource, generate_code, default_source
from .issuance import OTPIssuer
from .verification import OTPVerifier
from .gate import VerificationGate

__all__ = [
    # Models
    "GatePolicy",
    "OTPConfig",
    "IssueResult",
    "VerifyResult",
    "SendReceipt",
    # Generator
    "CodeGenerator",
    "RandomSource",
    "generate_code",
    "default_source",
    # Engines
    "OTPIssuer",
    "OTPVerifier",
    "VerificationGate",
]
