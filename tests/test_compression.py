"""Tests for the gzip compression adapter."""

import gzip
import os

import pytest
from starlette.responses import FileResponse, Response, StreamingResponse

from bridgegate.app.services.compression import accepts_gzip, maybe_compress

BODY = b'{"title":"J1T.FYI Bridge Gate"}' * 64


class TestAcceptsGzip:
    """Tests for the Accept-Encoding probe."""

    @pytest.mark.parametrize("header", [
        "gzip",
        "gzip, deflate, br",
        "deflate, GZIP",
        "br;q=1.0, gzip;q=0.8",
    ])
    def test_accepted(self, header):
        assert accepts_gzip(header) is True

    @pytest.mark.parametrize("header", [
        None,
        "",
        "identity",
        "deflate, br",
        "gzip;q=0",
        "x-gzip-ish",
    ])
    def test_not_accepted(self, header):
        assert accepts_gzip(header) is False


class TestMaybeCompress:
    """Tests for maybe_compress."""

    @pytest.mark.asyncio
    async def test_unchanged_without_gzip_support(self):
        response = Response(BODY, media_type="application/json")
        result = await maybe_compress(response, client_accepts_gzip=False)
        assert result is response
        assert result.body == BODY

    @pytest.mark.asyncio
    async def test_compresses_body(self):
        response = Response(
            BODY,
            status_code=201,
            media_type="application/json",
            headers={"Cache-Control": "public, max-age=3600", "X-Custom": "kept"},
        )

        result = await maybe_compress(response, client_accepts_gzip=True)

        assert gzip.decompress(result.body) == BODY
        assert result.status_code == 201
        assert result.headers["content-encoding"] == "gzip"
        assert result.headers["content-length"] == str(len(result.body))
        assert result.headers["content-type"] == "application/json"
        assert result.headers["cache-control"] == "public, max-age=3600"
        assert result.headers["x-custom"] == "kept"
        assert "Accept-Encoding" in result.headers["vary"]

    @pytest.mark.asyncio
    async def test_file_response(self, tmp_path):
        path = tmp_path / "app.js"
        path.write_bytes(BODY)
        response = FileResponse(path, stat_result=os.stat(path))

        result = await maybe_compress(response, client_accepts_gzip=True)

        assert gzip.decompress(result.body) == BODY
        assert result.headers["content-length"] == str(len(result.body))
        assert result.headers["etag"].startswith("W/")

    @pytest.mark.asyncio
    async def test_streaming_response(self):
        async def chunks():
            yield BODY[:100]
            yield BODY[100:].decode("utf-8")

        response = StreamingResponse(chunks(), media_type="application/json")
        result = await maybe_compress(response, client_accepts_gzip=True)
        assert gzip.decompress(result.body) == BODY

    @pytest.mark.asyncio
    async def test_already_encoded_left_alone(self):
        response = Response(gzip.compress(BODY), headers={"Content-Encoding": "gzip"})
        result = await maybe_compress(response, client_accepts_gzip=True)
        assert result is response

    @pytest.mark.asyncio
    async def test_not_modified_left_alone(self):
        response = Response(status_code=304)
        result = await maybe_compress(response, client_accepts_gzip=True)
        assert result is response
