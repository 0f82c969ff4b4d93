"""
ProFast Parcel API — Banner & Health Check Routes
===================================================

What:  GET / (plain-text banner) and GET /health (dependency report).
Who:   Uptime monitors, container health checks, load balancers.

Status levels:
    - healthy:   database reachable, identity provider and Stripe configured
    - degraded:  database reachable, identity provider or Stripe missing (200)
    - unhealthy: database unreachable (503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from profast import __version__
from profast.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()

BANNER = "ProFast Parcel API is running 🚀"


@router.get("/", response_class=PlainTextResponse, summary="Service banner")
async def root() -> str:
    return BANNER


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """
    Probe the database with a ping and report whether the identity
    provider and payment gateway were initialized at startup.
    """
    state = request.app.state
    overall = "healthy"

    gateway = getattr(state, "gateway", None)
    database = "connected" if gateway is not None and await gateway.ping() else "disconnected"

    identity = "configured" if getattr(state, "identity_verifier", None) is not None else "unavailable"
    payments = "configured" if getattr(state, "payment_gateway", None) is not None else "unavailable"

    if "unavailable" in (identity, payments):
        overall = "degraded"
    if database == "disconnected":
        overall = "unhealthy"
        logger.warning("Health check: database unreachable")

    report = HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        identity_provider=identity,
        payment_gateway=payments,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
