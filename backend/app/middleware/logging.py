"""
Sparkz Backend: Request Logging Middleware
===========================================

What:  One access-log line per request with status and duration.
How:   Measures from middleware entry to response; picks the level from the
       status class (5xx ERROR, 4xx WARNING, else INFO).
When:  Inside RequestIDMiddleware, so the request id is already known.

Logged: method, path, status, duration, client IP, request id, user id.
Not logged: bodies, query strings, Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.middleware.request_id import request_id_var

logger = logging.getLogger("sparkz.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request except health probes."""

    def __init__(self, app, skip_paths=None):
        super().__init__(app)
        self.skip_paths = set(skip_paths or {f"{settings.api_prefix}/health"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "%s %s raised after %.1fms [%s] from %s",
                method, path, duration_ms, rid, client_ip,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Set by the auth dependency when the request carried a valid token
        user_id = getattr(request.state, "user_id", None)

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_id if user_id is not None else "-",
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
