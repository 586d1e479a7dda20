"""Containment of unhandled exceptions.

Starlette's own server error layer re-raises after answering, which makes
the ASGI server log every failure a second time. This middleware answers
and logs once, and the exception stops here.
"""

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from bridgegate.app.core.logging import get_log_context, get_logger

logger = get_logger(__name__)


class ErrorContainmentMiddleware:
    """Pure ASGI middleware turning unhandled exceptions into a plain 500.

    The body never carries a traceback. With ``debug`` the exception type
    is appended.
    """

    def __init__(self, app: ASGIApp, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def wrapped_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as exc:
            state = scope.get("state") or {}
            logger.exception(
                "Error processing request to %s",
                scope.get("path"),
                extra=get_log_context(
                    request_id=state.get("request_id"),
                    client_id=state.get("client_id"),
                    method=scope.get("method"),
                    path=scope.get("path"),
                    exception_type=type(exc).__name__,
                    exception_message=str(exc),
                ),
            )
            # Nothing sensible can be sent once the headers are out
            if response_started:
                raise

            body = "Internal Server Error"
            if self.debug:
                body = f"{body}: {type(exc).__name__}"
            response = PlainTextResponse(
                body, status_code=500, headers={"Cache-Control": "no-store"}
            )
            await response(scope, receive, send)
