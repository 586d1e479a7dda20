"""Rate limiting middleware for the edge server.

Every request is counted against its client identity before routing.
Rejected requests get a 429 and never reach a handler; admitted ones carry
the quota headers on whatever response the handler produced.
"""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from bridgegate.app.core.logging import get_log_context, get_logger
from bridgegate.app.services.rate_limiter import RateLimitDecision, RateLimiter

logger = get_logger(__name__)

UNKNOWN_CLIENT = "unknown"


def client_identity(request: Request) -> str:
    """Get the rate limit identity for the request.

    Uses the first address of X-Forwarded-For, then X-Real-IP. Requests
    carrying neither share the "unknown" bucket; the server is expected to
    run behind a reverse proxy that sets them.

    Args:
        request: Incoming request

    Returns:
        Client identity string
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = request.headers.get("x-real-ip", "").strip()
    return real_ip or UNKNOWN_CLIENT


def apply_rate_limit_headers(headers: MutableHeaders, decision: RateLimitDecision) -> None:
    """Set the X-RateLimit-* headers for ``decision``."""
    headers["X-RateLimit-Limit"] = str(decision.limit)
    headers["X-RateLimit-Remaining"] = str(decision.remaining)
    headers["X-RateLimit-Reset"] = str(decision.reset_epoch)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce per-client rate limits on every request."""

    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request with rate limiting."""
        identity = client_identity(request)
        request.state.client_id = identity

        decision = self.limiter.admit(identity)

        if not decision.allowed:
            retry_after = decision.retry_after(self.limiter.now())
            logger.warning(
                "Rate limit exceeded",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    client_id=identity,
                    path=request.url.path,
                    retry_after=retry_after,
                ),
            )
            response = PlainTextResponse(
                "Rate limit exceeded",
                status_code=429,
                headers={
                    "Retry-After": str(retry_after),
                    "Cache-Control": "no-store",
                },
            )
            apply_rate_limit_headers(response.headers, decision)
            return response

        response = await call_next(request)
        apply_rate_limit_headers(response.headers, decision)
        return response
