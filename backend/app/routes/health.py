"""
Sparkz Backend: Health Check Route
===================================

What:  Liveness probe for load balancers and monitoring.
How:   Runs SELECT 1 against the pool. Mux is not probed; its availability
       only matters to signup and key rotation.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Health"])

# Module-level: initialised once at import
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns service status, server time, version and database connectivity.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "ok"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "degraded"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        time=datetime.now(timezone.utc),
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
