from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("contracts.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request, tagged with the caller's x-request-id (or a fresh one)."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()
        status = "NA"

        try:
            response = await call_next(request)
            status = response.status_code
        finally:
            logger.info(
                "request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
                request_id,
                request.method,
                request.url.path,
                status,
                (time.perf_counter() - start) * 1000.0,
            )

        response.headers["x-request-id"] = request_id
        return response
