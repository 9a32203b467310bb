"""
CampusLog Backend — Request Logging Middleware
================================================

What:  One access-log line per request: method, path, status, duration, request id.
Why:   Spreadsheet and Drive round-trips dominate latency; the duration shows
       which endpoints are slow as the tables grow.
How:   Log level follows the status class: 5xx → ERROR, 4xx → WARNING,
       everything else → INFO. /health is not logged.

Request bodies are never logged: they carry names, phone numbers and photos.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from campuslog.middleware.request_id import request_id_var

logger = logging.getLogger("campuslog.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request after its response is produced."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        # Why perf_counter: monotonic, so a wall-clock adjustment mid-request
        # cannot produce a negative duration
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # request.client is None when the ASGI server reports no peer address
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
