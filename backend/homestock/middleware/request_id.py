"""
HomeStock Backend — Request ID Middleware
===========================================

What:  Assigns a correlation ID to each incoming request and returns it in
       the X-Request-ID response header.
Why:   Every log line and every error body of a request carries the same ID,
       so a client-reported error can be matched to the server log.
How:   Reuses a well-formed client-supplied X-Request-ID or generates a short
       UUID, and stores it in a ContextVar (coroutine-local, safe under async).
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines; anything else is replaced
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when it is well-formed
        2. Otherwise generate an 8-character ID
        3. Store it in the ContextVar and on request.state
        4. Echo it in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        rid = supplied if _CLIENT_ID_PATTERN.match(supplied) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
