"""
Health Checks
=============
Liveness, readiness and component status for the verification service.
"""

import time
from enum import Enum
from typing import Callable, Dict, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel
import structlog

from .errors import StoreUnavailableError
from .store.base import KeyValueStore

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def check_store(store: KeyValueStore) -> ComponentHealth:
    """Check store connectivity and latency."""
    if store.degraded:
        return ComponentHealth(status="degraded", error=f"{store.name} store in use")
    try:
        start = time.time()
        await store.ping()
        latency = (time.time() - start) * 1000
        return ComponentHealth(status="connected", latency_ms=round(latency, 2))
    except StoreUnavailableError as e:
        logger.error("store_health_check_failed", store=store.name, error=str(e))
        return ComponentHealth(status="error", error="store unreachable")


def create_health_router(
    service_name: str,
    version: str,
    get_store: Callable[[], KeyValueStore],
    sender_configured: Callable[[], bool],
) -> APIRouter:
    """
    Create the health router.

    Args:
        service_name: Name reported in responses
        version: Service version
        get_store: Returns the store in use (resolved per request)
        sender_configured: Whether an OTP sender is available

    Returns:
        Router with /health, /health/live and /health/ready
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Component status. Degraded when running without a shared store or sender."""
        components: Dict[str, ComponentHealth] = {}
        overall = HealthStatus.HEALTHY

        store_health = await check_store(get_store())
        components["store"] = store_health
        if store_health.status == "error":
            overall = HealthStatus.UNHEALTHY
        elif store_health.status == "degraded":
            overall = HealthStatus.DEGRADED

        if sender_configured():
            components["sender"] = ComponentHealth(status="configured")
        else:
            components["sender"] = ComponentHealth(status="not_configured")
            if overall == HealthStatus.HEALTHY:
                overall = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall,
            service=service_name,
            version=version,
            components=components,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        store_health = await check_store(get_store())
        if store_health.status == "error":
            return Response(
                content='{"status": "not_ready", "reason": "store_unavailable"}',
                status_code=503,
                media_type="application/json",
            )
        return {"status": "ready"}

    return router
