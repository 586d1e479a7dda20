"""Middleware package for the edge server."""

from bridgegate.app.middleware.errors import ErrorContainmentMiddleware
from bridgegate.app.middleware.rate_limit import RateLimitMiddleware, client_identity
from bridgegate.app.middleware.request_id import RequestIdMiddleware, get_request_id
from bridgegate.app.middleware.timing import RequestTimingMiddleware

__all__ = [
    "ErrorContainmentMiddleware",
    "RateLimitMiddleware",
    "RequestIdMiddleware",
    "RequestTimingMiddleware",
    "client_identity",
    "get_request_id",
]
