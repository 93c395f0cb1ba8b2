"""
Edward Backend — Rate Limiting Middleware
===========================================

What:  Per-caller sliding window rate limiter.
Why:   Autosave fires a request every few seconds per open editor; a runaway
       client (stuck retry loop, many tabs) must not starve the database.
How:   Callers are keyed by the identity header when present, else by client
       IP. Each key keeps the timestamps of its requests inside the window.

Algorithm: Sliding Window Counter
    1. Each key gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise record the current timestamp and let the request through

Single-process only: state lives in this worker's memory.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from edward.config import settings
from edward.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_requests: Max requests per window (default: 1200)
        rate_limit_window:   Window duration in seconds (default: 3600)

    Exceptions raised inside middleware bypass the app's exception handlers,
    so the 429 body is rendered here from a RateLimitExceededError.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)

    @staticmethod
    def _caller_key(request: Request) -> str:
        user_id = request.headers.get(settings.identity_header)
        if user_id:
            return f"user:{user_id}"
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        key = self._caller_key(request)
        now = time.time()
        window_start = now - settings.rate_limit_window

        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= settings.rate_limit_requests:
            oldest = self._requests[key][0]
            retry_after = int(oldest + settings.rate_limit_window - now) + 1
            exc = RateLimitExceededError(retry_after=retry_after)

            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds window",
                key,
                len(self._requests[key]),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                },
                headers={"Retry-After": str(retry_after)},
            )

        self._requests[key].append(now)

        # Drop idle callers every 1000 recorded requests
        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))
