"""Health check API routes."""

import time

from fastapi import APIRouter, Request

from ...schemas.url import HealthResponse
from ...utils.shortener import format_timestamp, utc_now

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Returns:
        Health status, current time and seconds since startup.
    """
    return {
        "status": "healthy",
        "timestamp": format_timestamp(utc_now()),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }
