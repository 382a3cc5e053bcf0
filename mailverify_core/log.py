"""
Structured Logging
==================
structlog configuration and request/response logging middleware.

Usage:
    from mailverify_core.log import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="mailverify")
    app.add_middleware(RequestLoggingMiddleware)
"""

import logging
import sys
import time
import uuid

import structlog

logger = structlog.get_logger("http")

REQUEST_ID_HEADER = b"x-request-id"


def setup_logging(service_name: str, level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Bound to every log line as ``service``
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, console rendering otherwise
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # stdlib loggers (uvicorn, httpx, tenacity) share the same stream
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)
    structlog.get_logger(__name__).info("logging_configured", service=service_name, level=level.upper())


class RequestLoggingMiddleware:
    """
    ASGI middleware logging every HTTP request and response.

    Binds a request id into the structlog context for the duration of the
    request and echoes it back in ``X-Request-ID``.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # ASGI header values are raw bytes; latin-1 maps every byte
        headers = dict(scope.get("headers", []))
        req_id = headers.get(REQUEST_ID_HEADER, b"").decode("latin-1")[:64] or str(uuid.uuid4())[:8]
        method = scope.get("method", "")
        path = scope.get("path", "")

        client = scope.get("client")
        client_ip = client[0] if client else ""
        forwarded = headers.get(b"x-forwarded-for", b"").decode("latin-1")
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()

        structlog.contextvars.bind_contextvars(request_id=req_id)
        logger.info("http_request", method=method, path=path, client_ip=client_ip)

        start_time = time.time()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message.setdefault("headers", [])
                message["headers"] = list(message["headers"]) + [(REQUEST_ID_HEADER, req_id.encode("latin-1"))]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            log = logger.info if status_code < 400 else logger.warning if status_code < 500 else logger.error
            log(
                "http_response",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=duration_ms,
            )
            structlog.contextvars.unbind_contextvars("request_id")
