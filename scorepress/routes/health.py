"""
ScorePress Backend — Root & Health Check Routes
=================================================

What:  GET / (connection banner for the embedding page) and GET /health.
Why:   The frontend's custom function pings / to confirm the server is up;
       Docker and load balancers use /health to decide whether to route traffic.

Status levels:
    healthy:   record store reachable
    degraded:  record store unreachable (PDF endpoints still work, so HTTP 200)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from scorepress import __version__
from scorepress.database import ping
from scorepress.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get("/", response_class=HTMLResponse, summary="Connection banner")
async def root() -> HTMLResponse:
    return HTMLResponse("<p>Server connection for the custom function</p>")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Ping the record store and report aggregate status.

    The ping is the lightest possible round trip (`{"ping": 1}` on admin);
    it does not touch the student collection.
    """
    client = getattr(request.app.state, "mongo_client", None)
    database_ok = client is not None and await ping(client)

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        version=__version__,
        database="connected" if database_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
