"""
ASGI middleware for the HTTP server.
"""

from .auth import create_auth_middleware
from .body_limit import BodySizeLimitMiddleware
from .rate_limit import RateLimitMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "create_auth_middleware",
    "BodySizeLimitMiddleware",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
]
