"""
Postboard Backend — Request Logging Middleware
================================================

What:  One access-log line per request.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, request ID, caller and client IP on the
       "postboard.access" logger. 5xx logs at ERROR, 4xx at WARNING, the rest
       at INFO. GraphQL reports domain errors inside a 200 response, so those
       appear here as INFO; resolvers log them separately.

Never logged: request bodies, uploaded file contents, Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from postboard.middleware.request_id import request_id_var

logger = logging.getLogger("postboard.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        identity = getattr(request.state, "identity", None)
        caller = identity.user_id if identity is not None else "anonymous"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            caller,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": caller,
                "client_ip": client_ip,
            },
        )
        return response
