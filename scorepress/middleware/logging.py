"""
ScorePress Backend — Request Logging Middleware
=================================================

What:  One access-log line per request: method, path, status, duration,
       response size and client.
Why:   PDF endpoints can take seconds (remote downloads dominate) and their
       responses can be large; duration and size are how slow catalog hosts
       and oversized booklets show up.
How:   Measure around call_next and log at a level chosen by status class.

Example line:
    2024-01-15T12:00:00 [INFO] scorepress.access: POST /combine-pdfs 200 2311.4ms 48213B [a1b2c3d4] from 10.0.0.7

Request bodies are never logged (they contain student names and scores).
Streamed responses (/generatePDF) carry no Content-Length, so their size is "-".
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from scorepress.middleware.request_id import request_id_var

logger = logging.getLogger("scorepress.access")

# Probed every few seconds by orchestrators
QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-ID correlation; see module docstring for the line format."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
            "size": response.headers.get("content-length", "-"),
            "content_type": response.headers.get("content-type", ""),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms %sB [%s] from %s",
            fields["method"],
            path,
            fields["status"],
            elapsed_ms,
            fields["size"],
            fields["request_id"],
            fields["client_ip"],
            extra=fields,
        )
        return response
