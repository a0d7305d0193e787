"""
Rate Limiting Middleware

Per-client rate limits. Every route gets the standard limit; the expensive
LLM endpoints opt into a tighter one.
"""

from fastapi import FastAPI, Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.middleware.error_handler import RateLimitError, error_response
from config.settings import settings


LIMIT_STANDARD = "100/minute"
LIMIT_ANALYSIS = "10/minute"  # LLM-backed operations
LIMIT_UPLOAD = "30/minute"  # File uploads (each runs an analysis agent)


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[LIMIT_STANDARD],
    enabled=settings.rate_limit_enabled
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Render a 429 in the API error envelope."""
    error = RateLimitError(f"Rate limit exceeded: {exc.detail}")
    response = error_response(error.status_code, error.error_code, error.message)
    return request.app.state.limiter._inject_headers(
        response, getattr(request.state, "view_rate_limit", None)
    )


def setup_rate_limiting(app: FastAPI):
    """
    Set up rate limiting for the application.

    Routes opt into a tighter limit with @limiter.limit(LIMIT_...); they
    must accept a `request: Request` argument.
    """
    app.state.limiter = limiter
    # Sync handler: SlowAPIMiddleware calls it directly for default limits
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
