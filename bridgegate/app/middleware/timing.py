"""Request logging and slow-request detection.

Logs one line per request with its status and duration. Requests slower
than the configured threshold are logged as warnings. Nothing is aborted.
"""

import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bridgegate.app.core.logging import get_log_context, get_logger

logger = get_logger(__name__)


class RequestTimingMiddleware:
    """Pure ASGI middleware measuring request duration.

    Example:
        app.add_middleware(RequestTimingMiddleware, slow_request_threshold_ms=1000)
    """

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0):
        self.app = app
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()

        # Stays 500 if the app raises before starting a response
        status_code = 500

        async def wrapped_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            state = scope.get("state") or {}
            context = get_log_context(
                request_id=state.get("request_id"),
                client_id=state.get("client_id"),
                method=scope.get("method"),
                path=scope.get("path"),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
            )

            if duration_ms > self.slow_request_threshold_ms:
                logger.warning(
                    "Slow request to %s: %.2fms",
                    scope.get("path"),
                    duration_ms,
                    extra=context,
                )
            else:
                logger.info(
                    "%s %s -> %d (%.2fms)",
                    scope.get("method"),
                    scope.get("path"),
                    status_code,
                    duration_ms,
                    extra=context,
                )
