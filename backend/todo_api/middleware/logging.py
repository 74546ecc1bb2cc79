"""
Todo API - Access Log Middleware
================================

One line per request on the "todo_api.access" logger:

    PUT /api/tasks/5f0c… 200 4.2ms from 127.0.0.1 as user_2abc

The subject is whatever get_caller_identity stored on request.state, so
requests rejected before authentication log "anonymous". Request bodies
and the Authorization header are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("todo_api.access")


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    # Probed every few seconds by orchestrators
    QUIET_PATHS = frozenset({"/health"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        subject = getattr(request.state, "auth_subject", None) or "anonymous"

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms from %s as %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client_ip,
            subject,
            extra={"status": response.status_code, "duration_ms": round(elapsed_ms, 2)},
        )
        return response
