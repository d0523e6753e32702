"""
Formulario Backend — Access Log Middleware
============================================

What:  One log line per request on the "formulario.access" logger.
How:   Level follows the status (5xx ERROR, 4xx WARNING, else INFO).
       PDF downloads also report the document size and filename, which is
       what support asks for when a user says "the export is broken".

Skipped: GET /api/health (probes would drown everything else).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from formulario.middleware.request_id import request_id_var

logger = logging.getLogger("formulario.access")

QUIET_PATHS = frozenset({"/api/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        line = "%s %s %d %.1fms [%s]"
        args = [request.method, request.url.path, response.status_code, elapsed_ms, request_id_var.get("")]

        if response.headers.get("content-type", "").startswith("application/pdf"):
            line += " pdf=%sB %s"
            args += [
                response.headers.get("content-length", "?"),
                response.headers.get("content-disposition", ""),
            ]

        logger.log(_level_for(response.status_code), line, *args)
        return response
