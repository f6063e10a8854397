"""Health check endpoint."""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from route53_ddns.config import settings

# Process start, used for uptime reporting
_started_at = time.time()

router = APIRouter(tags=["Health"])


@router.get("/status")
async def get_status() -> JSONResponse:
    """
    Liveness check for monitoring and load balancers.

    Does not touch DynamoDB or Route 53, so it stays fast and
    unauthenticated.

    Returns:
        JSONResponse with status, service name, version and uptime_seconds
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "service": settings.api_title,
            "version": settings.api_version,
            "uptime_seconds": int(time.time() - _started_at),
        },
    )
