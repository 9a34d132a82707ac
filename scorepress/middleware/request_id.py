"""
ScorePress Backend — Request ID Middleware
============================================

What:  Tags each request with a short correlation ID and echoes it back.
Why:   Every error envelope carries `request_id`; the same value appears in
       the access log and in X-Request-ID, so a user-reported failure can be
       matched to its log lines.
How:   Reuse the caller's X-Request-ID when it is sane, otherwise generate
       one; store it in a ContextVar for handlers and loggers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Longer client-supplied IDs are replaced rather than logged verbatim
MAX_REQUEST_ID_LENGTH = 64


def _new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns `request.state.request_id` and sets the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()
        if not rid or len(rid) > MAX_REQUEST_ID_LENGTH:
            rid = _new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
