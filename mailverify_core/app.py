"""
Application Factory
===================
Builds the FastAPI app and wires store, sender and OTP engines.

Run with:
    uvicorn --factory mailverify_core.app:create_app
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
import structlog

from . import __version__
from .api import create_otp_router
from .config import Settings
from .errors import register_error_handlers
from .health import create_health_router
from .log import RequestLoggingMiddleware, setup_logging
from .middleware import SecurityHeadersMiddleware, setup_cors
from .otp import CodeGenerator, OTPConfig, OTPIssuer, OTPVerifier, VerificationGate, default_source
from .otp.generator import RandomSource
from .senders import NotificationSender, create_sender
from .store import KeyValueStore, create_store

logger = structlog.get_logger(__name__)

_UNSET: Any = object()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    sender: Optional[NotificationSender] = _UNSET,
    rng: Optional[RandomSource] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Create the verification service.

    Args:
        settings: Settings, read from the environment when omitted
        store: Store to use instead of the one selected from settings
        sender: Sender to use instead of the configured one; ``None`` means
            no sender is available
        rng: Random source for codes, overriding ``OTP_SECURE_RANDOM``
        configure_logging: Set up structlog from settings

    Returns:
        FastAPI application
    """
    settings = settings or Settings.from_env()
    if configure_logging:
        setup_logging(settings.service_name, settings.log_level, settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = store is None
        app_store = await create_store(settings) if owns_store else store
        owns_sender = sender is _UNSET
        app_sender = create_sender(settings) if owns_sender else sender
        if app_sender is not None:
            await app_sender.initialize()

        config = OTPConfig.from_settings(settings)
        generate = CodeGenerator(rng or default_source(settings.secure_random))
        app.state.store = app_store
        app.state.sender = app_sender
        app.state.issuer = OTPIssuer(app_store, app_sender, config, generate)
        app.state.verifier = OTPVerifier(app_store, config)
        app.state.gate = VerificationGate(app_store, config)

        logger.info(
            "service_started",
            service=settings.service_name,
            store=app_store.name,
            degraded=app_store.degraded,
            sender=app_sender.name if app_sender else None,
            gate_policy=config.gate_policy.value,
        )
        try:
            yield
        finally:
            if owns_sender and app_sender is not None:
                await app_sender.close()
            if owns_store:
                await app_store.close()
            logger.info("service_stopped", service=settings.service_name)

    app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)

    register_error_handlers(app)
    app.add_middleware(SecurityHeadersMiddleware)
    setup_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(create_otp_router(), prefix=settings.api_prefix)
    app.include_router(
        create_health_router(
            settings.service_name,
            __version__,
            get_store=lambda: app.state.store,
            sender_configured=lambda: app.state.sender is not None,
        )
    )

    @app.get("/")
    async def root():
        return {"message": "Email verification API is running"}

    return app
