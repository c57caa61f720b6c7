"""
HomeStock Backend — Health Check & Root Routes
================================================

What:  `GET /` welcome message and `GET /health` dependency report.
Why:   Load balancers and Docker health checks need to know whether the
       service can handle traffic end-to-end.
How:   Runs lightweight checks against the database (SELECT 1) and the
       media host (Admin API ping).

Status levels:
    - healthy:   All dependencies operational (HTTP 200)
    - degraded:  Media host unreachable; stock without images still works (HTTP 200)
    - unhealthy: Database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from homestock import __version__
from homestock.schemas.stock import HealthResponse, MessageResponse
from homestock.services.image_service import ImageService, get_image_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="API welcome message")
async def root() -> MessageResponse:
    return MessageResponse(message="Welcome to Home Stock API")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies. "
        "Used by Docker health checks and load balancers."
    ),
)
async def health_check(
    request: Request,
    image_service: ImageService = Depends(get_image_service),
):
    db_status = "connected"
    media_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Media Host ──────────────────────────────────────────────────
    if not await image_service.health_check():
        media_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media_host=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
