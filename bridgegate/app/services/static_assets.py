"""Read access to the pre-built widget bundle on disk."""

import os
from pathlib import Path
from typing import Union

from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from bridgegate.app.exceptions import AssetNotFoundError, AssetReadError


class StaticAssetSource:
    """The bundle directory produced by the frontend build.

    Directory serving (path resolution, traversal checks, content types,
    ETag and conditional requests) is delegated to Starlette's
    ``StaticFiles``. Lookups that miss raise ``AssetNotFoundError``; files
    that exist but cannot be read raise ``AssetReadError``.
    """

    def __init__(self, directory: Union[str, os.PathLike]):
        self.directory = Path(directory)
        # The bundle may be built after the server starts
        self._files = StaticFiles(directory=self.directory, check_dir=False)

    @staticmethod
    def relative_path(url_path: str) -> str:
        """Turn a URL path into a path relative to the bundle root."""
        parts = [part for part in url_path.split("/") if part]
        return os.path.normpath(os.path.join(*parts)) if parts else "."

    def _resolve(self, path: str) -> Path:
        root = self.directory.resolve()
        full_path = (root / self.relative_path(path)).resolve()
        if full_path != root and root not in full_path.parents:
            raise AssetNotFoundError(path)
        return full_path

    async def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read a whole bundle file as text.

        Raises:
            AssetNotFoundError: If the file does not exist
            AssetReadError: If the file exists but cannot be read or decoded
        """
        full_path = self._resolve(path)
        try:
            return await run_in_threadpool(full_path.read_text, encoding=encoding)
        except FileNotFoundError as exc:
            raise AssetNotFoundError(path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise AssetReadError(path, str(exc)) from exc

    async def get_response(self, path: str, scope: Scope) -> Response:
        """Serve a bundle file for the request in ``scope``.

        Returns the ``FileResponse`` (or a 304 when the client's cached copy
        is current).

        Raises:
            AssetNotFoundError: If no file exists at ``path``
            AssetReadError: If the file cannot be accessed
        """
        try:
            return await self._files.get_response(self.relative_path(path), scope)
        except HTTPException as exc:
            if exc.status_code in (404, 405):
                raise AssetNotFoundError(path) from exc
            raise AssetReadError(path, f"HTTP {exc.status_code}") from exc
        except OSError as exc:
            raise AssetReadError(path, str(exc)) from exc
