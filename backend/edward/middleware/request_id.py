"""
Edward Backend — Request ID Middleware
========================================

What:  Gives every request a short correlation id and returns it in the
       X-Request-ID response header.
Why:   Error bodies carry the same id, so a user's bug report ("autosave
       failed, request a1b2c3d4") maps straight to the server log lines.
How:   A client-supplied X-Request-ID is reused; otherwise an 8-character
       UUID prefix is generated. The id is kept in a ContextVar so loggers and
       exception handlers can read it without access to the request.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local; concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
