"""Health Checks — liveness for the process, readiness for the database.

Invariants:
    - GET /health/ never touches the database and always answers 200
    - GET /health/ready answers 503 while the database ping fails
"""

import logging
import time

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from pecup.config import get_settings
from pecup.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "pecup-api"
SERVICE_VERSION = "1.0.0"


@router.get("/")
async def liveness():
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": get_settings().environment,
    }


@router.get("/ready")
async def readiness():
    manager = database.db_manager
    started = time.perf_counter()
    reachable = manager is not None and await manager.health_check()
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
    if not reachable:
        logger.warning(f"Readiness failed after {elapsed_ms}ms")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "latency_ms": elapsed_ms,
    }
