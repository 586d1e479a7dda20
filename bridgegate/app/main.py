from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bridgegate.app.api.widget import router as widget_router
from bridgegate.app.core.config import Settings, settings
from bridgegate.app.core.logging import get_log_context, get_logger, setup_logging
from bridgegate.app.exceptions import AssetNotFoundError, AssetReadError, UnsupportedChainError
from bridgegate.app.middleware.errors import ErrorContainmentMiddleware
from bridgegate.app.middleware.rate_limit import RateLimitMiddleware
from bridgegate.app.middleware.request_id import RequestIdMiddleware
from bridgegate.app.middleware.timing import RequestTimingMiddleware
from bridgegate.app.services.rate_limiter import RateLimiter
from bridgegate.app.services.static_assets import StaticAssetSource

NO_STORE = {"Cache-Control": "no-store"}


def _request_context(request: Request, **extra) -> dict:
    return get_log_context(
        request_id=getattr(request.state, "request_id", None),
        client_id=getattr(request.state, "client_id", None),
        method=request.method,
        path=request.url.path,
        **extra,
    )


def create_app(
    app_settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the environment-loaded ones
        rate_limiter: Limiter to use instead of one built from settings

    Returns:
        Configured FastAPI application instance
    """
    if app_settings is None:
        app_settings = settings

    # Setup logging
    setup_logging(app_settings)
    logger = get_logger(__name__)

    limiter = rate_limiter
    if limiter is None:
        limiter = RateLimiter(
            limit=app_settings.rate_limit_requests,
            window_seconds=app_settings.rate_limit_window_seconds,
            algorithm=app_settings.rate_limit_algorithm,
            max_entries=app_settings.rate_limit_max_entries,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan context manager.

        Starts the rate limiter's periodic sweep on startup and stops it,
        dropping all client windows, on shutdown.
        """
        limiter.start()
        logger.info(
            "Application startup complete",
            extra={
                "static_dir": app_settings.static_dir,
                "default_input_chain": app_settings.default_input_chain,
                "gzip_enabled": app_settings.gzip_enabled,
            },
        )

        yield

        await limiter.stop()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="BridgeGate",
        description="Edge server for the BridgeGate cross-chain bridge widget",
        version="1.0.0",
        lifespan=lifespan,
        # Only the widget routes are public; everything else is a 404
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = app_settings
    app.state.rate_limiter = limiter
    app.state.asset_source = StaticAssetSource(app_settings.static_dir)

    # Add middleware (order matters: last added = first executed)
    # Rate limit middleware (innermost - closest to route)
    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    # Request ID middleware for log correlation
    app.add_middleware(RequestIdMiddleware)

    # Timing middleware (measures everything above)
    app.add_middleware(
        RequestTimingMiddleware,
        slow_request_threshold_ms=app_settings.slow_request_threshold_ms,
    )

    # Error containment (outermost - answers unhandled exceptions with a 500)
    app.add_middleware(ErrorContainmentMiddleware, debug=app_settings.debug)

    app.include_router(widget_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> PlainTextResponse:
        """Unrouted paths and unsupported methods are all plain 404s."""
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404, headers=NO_STORE)
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers={**(exc.headers or {}), **NO_STORE},
        )

    @app.exception_handler(AssetNotFoundError)
    async def asset_not_found_handler(
        request: Request, exc: AssetNotFoundError
    ) -> PlainTextResponse:
        """Handle a bundle lookup miss and return HTTP 404 response."""
        return PlainTextResponse("Not Found", status_code=exc.status_code)

    @app.exception_handler(AssetReadError)
    async def asset_read_error_handler(
        request: Request, exc: AssetReadError
    ) -> PlainTextResponse:
        """Handle an unreadable bundle file and return HTTP 500 response."""
        logger.error(
            f"Error serving {exc.path}: {exc.reason or exc.message}",
            extra=_request_context(request),
        )
        return PlainTextResponse("Server Error", status_code=exc.status_code, headers=NO_STORE)

    @app.exception_handler(UnsupportedChainError)
    async def unsupported_chain_handler(
        request: Request, exc: UnsupportedChainError
    ) -> PlainTextResponse:
        """Handle a widget config built for an unknown chain and return HTTP 500 response."""
        logger.error(
            f"Widget config error: {exc.message}",
            extra=_request_context(request, chain_id=exc.chain_id),
        )
        return PlainTextResponse(
            "Internal Server Error", status_code=exc.status_code, headers=NO_STORE
        )

    return app


# Create the application instance
app = create_app()
