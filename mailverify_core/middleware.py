"""
HTTP Middleware Helpers
=======================
CORS configuration and security headers.
"""

from typing import Awaitable, Callable, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

logger = structlog.get_logger(__name__)


def setup_cors(
    app: FastAPI,
    origins: List[str],
    allow_credentials: bool = True,
    allow_methods: Optional[List[str]] = None,
    allow_headers: Optional[List[str]] = None,
) -> None:
    """
    Configure CORS middleware with secure defaults.

    Args:
        app: FastAPI application instance
        origins: Allowed origins
        allow_credentials: Allow cookies/auth headers (default: True)
        allow_methods: Allowed HTTP methods (default: GET, POST, OPTIONS)
        allow_headers: Allowed headers (default: Content-Type, x-api-key)
    """
    if "*" in origins:
        logger.warning("cors_wildcard_detected", origins=origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods or ["GET", "POST", "OPTIONS"],
        allow_headers=allow_headers or ["Content-Type", "x-api-key"],
    )
    logger.info("cors_configured", origins_count=len(origins))


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    - X-Content-Type-Options: nosniff
    - X-Frame-Options: clickjacking protection
    - Referrer-Policy
    - Strict-Transport-Security (optional)
    - Cross-Origin-Resource-Policy
    """

    def __init__(
        self,
        app,
        enable_hsts: bool = True,
        hsts_max_age: int = 31536000,  # 1 year
        frame_options: str = "DENY",
        referrer_policy: str = "no-referrer",
    ):
        super().__init__(app)
        self.enable_hsts = enable_hsts
        self.hsts_max_age = hsts_max_age
        self.frame_options = frame_options
        self.referrer_policy = referrer_policy

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = self.frame_options
        response.headers["Referrer-Policy"] = self.referrer_policy
        response.headers["Cross-Origin-Resource-Policy"] = "same-site"
        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = f"max-age={self.hsts_max_age}; includeSubDomains"

        return response
