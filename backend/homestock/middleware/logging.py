"""
HomeStock Backend — Request Logging Middleware
================================================

What:  One access log line for every HTTP request.
Why:   Status and duration per request, correlated by request ID. For stock
       writes the body size is logged too, since uploads dominate latency.
How:   Measures time around call_next and logs on the "homestock.access"
       logger; the level follows the status class.

Example:
    POST /api/v1/stock -> 201 in 412.3ms body=183204B [1a2b3c4d] from 10.0.0.7

Not logged: form fields and image bytes.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from homestock.middleware.request_id import request_id_var

logger = logging.getLogger("homestock.access")

# Probed every few seconds by load balancers
QUIET_PATHS = frozenset({"/health"})

WRITE_METHODS = frozenset({"POST", "PATCH"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        body_size = None
        if request.method in WRITE_METHODS:
            body_size = request.headers.get("content-length")

        rid = request_id_var.get("")
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s -> %d in %.1fms%s [%s] from %s",
            request.method,
            path,
            status,
            elapsed_ms,
            f" body={body_size}B" if body_size else "",
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(elapsed_ms, 2),
                "body_bytes": int(body_size) if body_size and body_size.isdigit() else None,
                "client_ip": client_ip,
            },
        )
        return response
