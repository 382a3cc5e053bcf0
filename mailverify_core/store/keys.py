"""Store key namespace. Shared with existing deployments; do not change."""

OTP_PREFIX = "otp"
COOLDOWN_PREFIX = "otp-cooldown"
ATTEMPTS_PREFIX = "otp-attempts"
VERIFIED_PREFIX = "verified"

SENTINEL = "1"


def otp_key(email: str) -> str:
    return f"{OTP_PREFIX}:{email}"


def cooldown_key(email: str) -> str:
    return f"{COOLDOWN_PREFIX}:{email}"


def attempts_key(email: str) -> str:
    return f"{ATTEMPTS_PREFIX}:{email}"


def verified_key(email: str) -> str:
    return f"{VERIFIED_PREFIX}:{email}"
