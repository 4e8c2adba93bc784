"""
Request middleware

Tags every request with an id (taken from X-Request-ID when the caller sends
one) so the log lines of a request, including the workflow transitions and
side-effect failures it triggers, can be correlated.
"""

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from chronicle.core.config import settings
from chronicle.core.logging_config import logger, set_request_id, set_user_id, generate_request_id


QUIET_PATHS = frozenset({
    "/health",
    f"/api/{settings.API_VERSION}/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
})

SLOW_REQUEST_MS = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request ids, timing headers and one summary line per request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.log_error_with_context(
                exc,
                context=f"{request.method} {path}",
                duration_ms=round((time.perf_counter() - started) * 1000, 1)
            )
            raise
        finally:
            set_user_id("")

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.1f}ms"

        if path not in QUIET_PATHS:
            logger.log_request(request.method, path, response.status_code, duration_ms)
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(f"Slow request: {request.method} {path} took {duration_ms:.0f}ms")

        set_request_id("")
        return response
