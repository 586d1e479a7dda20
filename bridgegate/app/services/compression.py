"""Per-response gzip compression.

Unlike Starlette's ``GZipMiddleware`` this is applied by the handlers that
want it, so the SPA root document can stay uncompressed while config and
asset responses are gzipped. Bodies are fully buffered in memory; only use
it for bounded bodies.
"""

import gzip
from pathlib import Path

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import MutableHeaders
from starlette.responses import FileResponse, Response, StreamingResponse


GZIP_LEVEL = 9

# Headers that describe the uncompressed representation
_STALE_HEADERS = ("content-length", "content-encoding", "content-range", "accept-ranges")


def accepts_gzip(accept_encoding: str | None) -> bool:
    """Return whether an Accept-Encoding header value allows gzip.

    Args:
        accept_encoding: Raw header value, or None if absent

    Returns:
        True if gzip is listed and not refused with q=0
    """
    if not accept_encoding:
        return False
    for item in accept_encoding.split(","):
        coding, _, params = item.strip().partition(";")
        if coding.strip().lower() != "gzip":
            continue
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name.strip().lower() == "q":
                try:
                    return float(value) > 0
                except ValueError:
                    return False
        return True
    return False


async def read_body(response: Response) -> bytes:
    """Read a response's whole body into memory."""
    if isinstance(response, FileResponse):
        return await run_in_threadpool(Path(response.path).read_bytes)
    if isinstance(response, StreamingResponse):
        chunks = []
        async for chunk in response.body_iterator:
            chunks.append(chunk.encode(response.charset) if isinstance(chunk, str) else chunk)
        return b"".join(chunks)
    return bytes(response.body)


async def maybe_compress(response: Response, client_accepts_gzip: bool) -> Response:
    """Gzip ``response`` if the client accepts it.

    Args:
        response: Response to transform
        client_accepts_gzip: Result of :func:`accepts_gzip` for the request

    Returns:
        The same response when compression does not apply, otherwise a new
        response with the compressed body, the original status and headers,
        ``Content-Encoding: gzip`` and a recomputed ``Content-Length``.
    """
    if not client_accepts_gzip:
        return response
    if response.status_code in (204, 304) or "content-encoding" in response.headers:
        return response

    body = await read_body(response)
    compressed = await run_in_threadpool(gzip.compress, body, GZIP_LEVEL)

    headers = MutableHeaders(raw=[
        (key, value) for key, value in response.raw_headers
        if key.decode("latin-1") not in _STALE_HEADERS
    ])
    headers["Content-Encoding"] = "gzip"
    headers["Content-Length"] = str(len(compressed))
    headers.add_vary_header("Accept-Encoding")
    etag = headers.get("etag")
    if etag and not etag.startswith("W/"):
        headers["ETag"] = f"W/{etag}"

    return Response(
        content=compressed,
        status_code=response.status_code,
        headers=dict(headers),
        background=response.background,
    )
