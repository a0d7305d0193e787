"""
API Middleware Package

Error handling, rate limiting and request logging.
"""

from api.middleware.error_handler import (
    setup_error_handlers,
    APIError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AgentOutputError,
)
from api.middleware.logging import LoggingMiddleware
from api.middleware.rate_limit import (
    setup_rate_limiting,
    limiter,
    LIMIT_STANDARD,
    LIMIT_ANALYSIS,
    LIMIT_UPLOAD,
)

__all__ = [
    "setup_error_handlers",
    "APIError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AgentOutputError",
    "LoggingMiddleware",
    "setup_rate_limiting",
    "limiter",
    "LIMIT_STANDARD",
    "LIMIT_ANALYSIS",
    "LIMIT_UPLOAD",
]
