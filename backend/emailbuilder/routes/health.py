"""
Email Builder Backend — Health Check Route
===========================================

What:  Health check endpoint for monitoring and container probes.
How:   Pings the template store and reports whether media host credentials
       are present. Never contacts the media host.

Status levels:
    - healthy:  store reachable and media host configured
    - degraded: either dependency unavailable (still HTTP 200, because the
                process keeps serving whatever it can)
"""

import logging
import time

from fastapi import APIRouter, Request

from emailbuilder import __version__
from emailbuilder.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    store = getattr(request.app.state, "store", None)
    uploader = getattr(request.app.state, "media_uploader", None)

    db_status = "connected" if store is not None and await store.ping() else "disconnected"
    media_status = "configured" if uploader is not None and uploader.is_configured else "unconfigured"

    overall = "healthy"
    if db_status != "connected" or media_status != "configured":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
