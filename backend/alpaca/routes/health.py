"""
Alpaca API — Health Check Route
================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings MongoDB and reports the aggregate status.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   MongoDB answered the ping (HTTP 200)
    - unhealthy: MongoDB unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response

from alpaca import __version__
from alpaca.database import ping
from alpaca.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its database. "
        "Answers 503 while MongoDB cannot be reached."
    ),
)
async def health_check(response: Response) -> HealthResponse:
    """
    Check the health of the service and its database.

    Database: runs the `ping` admin command (no collection access).
    """
    db_status = "connected"
    overall = "healthy"

    if not await ping():
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
