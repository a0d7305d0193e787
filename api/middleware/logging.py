"""
Logging Middleware

Request/response logging with a short correlation ID per request.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("intellibid.api.requests")

# Long-lived streams are logged when opened, not timed
STREAMING_SUFFIX = "/evaluation-progress"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path and client of every request, then its status and
    duration. Adds X-Correlation-ID and X-Response-Time-Ms headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = str(uuid.uuid4())[:8]
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            f"[{correlation_id}] {request.method} {request.url.path} "
            f"from {client_ip}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{correlation_id}] {request.method} {request.url.path} "
                f"ERROR: {str(e)} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        if request.url.path.endswith(STREAMING_SUFFIX):
            logger.info(f"[{correlation_id}] stream opened -> {response.status_code}")
        else:
            log_level = logging.INFO if response.status_code < 400 else logging.WARNING
            logger.log(
                log_level,
                f"[{correlation_id}] {request.method} {request.url.path} "
                f"-> {response.status_code} ({duration_ms:.2f}ms)"
            )

        return response


def get_correlation_id(request: Request) -> str:
    """Get the correlation ID from the request state."""
    return getattr(request.state, "correlation_id", "unknown")
