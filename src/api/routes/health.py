"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from src.application.dto.responses import ComponentHealthResponse, HealthResponse
from src.application.services import get_store
from src.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()

# Collection probed by the storage check; never written
_PROBE_COLLECTION = "_health"


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/storage", response_model=HealthResponse)
async def storage_health() -> HealthResponse:
    """
    Document store health check.

    Runs a read against the configured backend and reports its latency.
    """
    backend = get_settings().storage.backend

    try:
        store = get_store()
        start = time.time()
        await store.get(_PROBE_COLLECTION, "probe")
        latency = (time.time() - start) * 1000

        storage_status = ComponentHealthResponse(
            name=backend,
            available=True,
            latency_ms=latency,
        )

    except Exception as e:
        storage_status = ComponentHealthResponse(
            name=backend,
            available=False,
            error=str(e),
        )

    return HealthResponse(
        status="healthy" if storage_status.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        storage=storage_status,
    )
