"""
OTP Error Taxonomy
==================
Exceptions raised by the OTP engines and their mapping to HTTP responses.

Every error carries a machine-readable ``code`` and a short human message.
Internal details (store keys, Redis diagnostics, provider payloads) are
logged, never returned to the caller.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class OTPError(Exception):
    """Base class for every error that may reach the HTTP boundary."""

    code: str = "otp_error"
    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(OTPError):
    """Malformed or missing input. Never retried automatically."""
    code = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class Throttled(OTPError):
    """Cooldown window still active for this address."""
    code = "throttled"
    status_code = 429
    default_message = "Please wait before requesting another code."

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class CodeExpired(OTPError):
    """No pending code: never issued, expired, or already consumed."""
    code = "no_pending_code"
    status_code = 400
    default_message = "No OTP requested or it expired"


class InvalidCode(OTPError):
    """Submitted code does not match. The attempt has been counted."""
    code = "invalid_code"
    status_code = 400
    default_message = "Invalid OTP"

    def __init__(self, message: Optional[str] = None, attempts_remaining: Optional[int] = None):
        super().__init__(message)
        self.attempts_remaining = attempts_remaining


class TooManyAttempts(OTPError):
    """Attempt budget for the pending code is spent; a new code is required."""
    code = "too_many_attempts"
    status_code = 429
    default_message = "Too many attempts, please request a new code."


class NotVerified(OTPError):
    """Address has not completed OTP verification."""
    code = "not_verified"
    status_code = 403
    default_message = "Sender email not verified. Please verify via OTP before sending messages."


class ServiceUnavailable(OTPError):
    """Store or sender unreachable."""
    code = "service_unavailable"
    status_code = 500
    default_message = "Service temporarily unavailable"


class SenderNotConfigured(ServiceUnavailable):
    code = "sender_not_configured"
    default_message = "Email sender is not configured"


class DeliveryFailed(ServiceUnavailable):
    code = "delivery_failed"
    default_message = "Could not deliver the verification code"


# Internal errors. These never cross the engine boundary.

class StoreUnavailableError(Exception):
    """Raised by store strategies when the backing store cannot be reached."""

    def __init__(self, message: str, operation: str = "unknown"):
        self.operation = operation
        super().__init__(f"[{operation}] {message}")


class SenderError(Exception):
    """Raised by notification senders when delivery fails."""

    def __init__(self, message: str, provider: str = "unknown", status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"[{provider}] {message} (Status: {status_code})")


def error_response(exc: OTPError) -> JSONResponse:
    headers = None
    if isinstance(exc, Throttled) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """
    Install the JSON error handlers on a FastAPI app.

    - ``OTPError`` subclasses map to their own status and code.
    - Body/shape validation failures map to 400 ``validation_error``.
    - Anything else is logged and returned as a generic 500.
    """

    @app.exception_handler(OTPError)
    async def otp_error_handler(request: Request, exc: OTPError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log("otp_request_failed", path=request.url.path, code=exc.code)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("request_body_rejected", path=request.url.path, errors=len(exc.errors()))
        return error_response(ValidationError("Invalid request body"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong!", "code": "internal_error"},
        )
