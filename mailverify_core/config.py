"""
Service Configuration
=====================
Settings read from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

TRUTHY = ("1", "true", "yes", "on")


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    # Unset, non-numeric or non-positive values fall back to the default
    try:
        value = int(env.get(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


def _optional_int(env: Mapping[str, str], name: str) -> Optional[int]:
    value = _int(env, name, 0)
    return value or None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        value = float(env.get(name, ""))
    except ValueError:
        return default
    return value if value > 0 else default


def _bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in TRUTHY


@dataclass
class Settings:
    """Runtime settings for the verification service."""

    # OTP lifecycle
    otp_ttl_seconds: int = 600
    cooldown_seconds: int = 60
    max_verify_attempts: int = 5
    verified_ttl_seconds: Optional[int] = None  # None = marker never expires
    secure_random: bool = False
    gate_fail_open: bool = False

    # Sender
    otp_from: str = "verify@mail.example.com"
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com"

    # Store
    redis_url: Optional[str] = None
    redis_host: Optional[str] = None
    redis_port: int = 6379
    redis_username: str = "default"
    redis_password: Optional[str] = None
    redis_tls: bool = False
    redis_timeout_seconds: float = 2.0

    # HTTP
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    api_prefix: str = "/email/api"
    service_name: str = "mailverify"
    version: str = "1.0.0"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def redis_configured(self) -> bool:
        return bool(self.redis_url or (self.redis_host and self.redis_password))

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``os.environ`` (or any mapping, for tests)."""
        env = os.environ if env is None else env
        origins = env.get("CORS_ORIGINS", "http://localhost:3000")
        return cls(
            otp_ttl_seconds=_int(env, "OTP_TTL_SECONDS", 600),
            cooldown_seconds=_int(env, "OTP_COOLDOWN_SECONDS", 60),
            max_verify_attempts=_int(env, "MAX_VERIFY_ATTEMPTS", 5),
            verified_ttl_seconds=_optional_int(env, "VERIFIED_TTL_SECONDS"),
            secure_random=_bool(env, "OTP_SECURE_RANDOM"),
            gate_fail_open=_bool(env, "VERIFIED_GATE_FAIL_OPEN"),
            otp_from=env.get("FROM_VERIFY") or "verify@mail.example.com",
            resend_api_key=env.get("RESEND_API_KEY") or None,
            resend_api_url=env.get("RESEND_API_URL") or "https://api.resend.com",
            redis_url=env.get("REDIS_URL") or None,
            redis_host=env.get("REDIS_HOST") or None,
            redis_port=_int(env, "REDIS_PORT", 6379),
            redis_username=env.get("REDIS_USERNAME") or "default",
            redis_password=env.get("REDIS_PASSWORD") or None,
            redis_tls=_bool(env, "REDIS_TLS"),
            redis_timeout_seconds=_float(env, "REDIS_TIMEOUT_SECONDS", 2.0),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            api_prefix=env.get("API_PREFIX", "/email/api").rstrip("/"),
            service_name=env.get("SERVICE_NAME") or "mailverify",
            log_level=env.get("LOG_LEVEL") or "INFO",
            log_json=_bool(env, "LOG_JSON", default=True),
        )
