"""Widget endpoints: configuration document, SPA root and bundle assets.

Routes are registered in match order. The asset route is a catch-all, so
it must stay last; it answers 404 itself for paths that are not assets.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, Response

from bridgegate.app.core.config import Settings
from bridgegate.app.core.logging import get_log_context, get_logger
from bridgegate.app.exceptions import AssetNotFoundError, AssetReadError
from bridgegate.app.services.compression import accepts_gzip, maybe_compress
from bridgegate.app.services.static_assets import StaticAssetSource
from bridgegate.app.services.widget_config import widget_config_json

logger = get_logger(__name__)
router = APIRouter()

ASSETS_PREFIX = "/assets/"
ASSET_EXTENSIONS = (".ico", ".png", ".svg", ".webmanifest")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_asset_source(request: Request) -> StaticAssetSource:
    return request.app.state.asset_source


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
AssetSourceDep = Annotated[StaticAssetSource, Depends(get_asset_source)]


def is_asset_path(path: str) -> bool:
    """Whether ``path`` is served from the bundle directory."""
    return path.startswith(ASSETS_PREFIX) or path.endswith(ASSET_EXTENSIONS)


def cache_control(max_age: int) -> str:
    return f"public, max-age={max_age}"


async def _compress_if_accepted(
    request: Request, response: Response, app_settings: Settings
) -> Response:
    client_accepts_gzip = app_settings.gzip_enabled and accepts_gzip(
        request.headers.get("accept-encoding")
    )
    return await maybe_compress(response, client_accepts_gzip)


@router.api_route("/widget-config", methods=["GET", "HEAD", "OPTIONS"])
async def widget_config(request: Request, app_settings: SettingsDep) -> Response:
    """Serve the widget configuration document as JSON."""
    body = widget_config_json(app_settings.default_input_chain)
    response = Response(
        content=body,
        media_type="application/json",
        headers={
            "Cache-Control": cache_control(app_settings.dynamic_cache_max_age),
            "X-Content-Type-Options": "nosniff",
            **CORS_HEADERS,
        },
    )
    return await _compress_if_accepted(request, response, app_settings)


@router.api_route("/", methods=["GET", "HEAD"])
@router.api_route("/index.html", methods=["GET", "HEAD"])
async def index(app_settings: SettingsDep, asset_source: AssetSourceDep) -> Response:
    """Serve the SPA root document. Never compressed."""
    try:
        html = await asset_source.read_text(app_settings.index_file)
    except AssetNotFoundError as exc:
        # A missing root document means a broken deployment, not a client error
        raise AssetReadError(exc.path, "file missing") from exc

    return HTMLResponse(
        html,
        headers={"Cache-Control": cache_control(app_settings.dynamic_cache_max_age)},
    )


@router.api_route("/{asset_path:path}", methods=["GET", "HEAD"])
async def static_asset(
    request: Request,
    app_settings: SettingsDep,
    asset_source: AssetSourceDep,
) -> Response:
    """Serve a file from the bundle directory."""
    path = request.url.path
    if not is_asset_path(path):
        raise HTTPException(status_code=404)

    try:
        response = await asset_source.get_response(path, request.scope)
    except AssetNotFoundError:
        logger.error(
            "Failed to serve: %s",
            path,
            extra=get_log_context(
                request_id=getattr(request.state, "request_id", None), path=path
            ),
        )
        raise

    max_age = (
        app_settings.static_cache_max_age
        if path.startswith(ASSETS_PREFIX)
        else app_settings.dynamic_cache_max_age
    )
    response.headers["Cache-Control"] = cache_control(max_age)

    try:
        return await _compress_if_accepted(request, response, app_settings)
    except OSError as exc:
        raise AssetReadError(path, str(exc)) from exc
