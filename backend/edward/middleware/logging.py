"""
Edward Backend — Request Logging Middleware
=============================================

What:  One access log line per request: method, path, status, duration,
       request id and, once the identity dependency has run, the user id.
Why:   Autosave traffic is high-volume and repetitive; a compact line per
       request with the caller attached is what makes a misbehaving client
       findable.

Never logged: request bodies (document content is private) and headers.

Log levels:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from edward.middleware.request_id import request_id_var

logger = logging.getLogger("edward.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request after its response is ready. /health is skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        # Set by get_current_user; absent for unauthenticated requests
        user_id = getattr(request.state, "user_id", None)

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            user_id if user_id is not None else "-",
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
            },
        )
        return response
