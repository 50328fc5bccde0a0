"""Tests for GzipMiddleware, GzipWriter and Accept-Encoding negotiation."""

import gzip

import pytest

from spaserve.http.headers import Headers
from spaserve.http.request import Request
from spaserve.http.response import Response, StreamingResponse
from spaserve.middleware.compression import GzipMiddleware, GzipWriter, accepts_gzip
from spaserve.testing import TestClient, assert_gzip_body, header_values


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


def _request(accept_encoding: str | None = "gzip") -> Request:
    headers = [] if accept_encoding is None else [(b"accept-encoding", accept_encoding.encode())]
    return Request.from_asgi({"method": "GET", "path": "/", "headers": headers})


async def _collect(response: StreamingResponse) -> bytes:
    return b"".join([chunk async for chunk in response.chunks])


class TestAcceptsGzip:
    @pytest.mark.parametrize(
        "value",
        [
            "gzip",
            "GZIP",
            "deflate, gzip",
            "gzip;q=0.5",
            "x-gzip",
            "*",
            "br;q=1.0, gzip;q=0.8, *;q=0.1",
        ],
    )
    def test_accepted(self, value: str) -> None:
        assert accepts_gzip(_h(("Accept-Encoding", value)))

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "identity",
            "br, deflate",
            "gzip;q=0",
            "gzip;q=0.0, br",
            "gzip;q=nonsense",
            "*;q=0",
            "*, gzip;q=0",
            ",,,",
        ],
    )
    def test_refused(self, value: str) -> None:
        assert not accepts_gzip(_h(("Accept-Encoding", value)))

    def test_absent_header(self) -> None:
        assert not accepts_gzip(_h())

    def test_repeated_headers_are_merged(self) -> None:
        assert accepts_gzip(_h(("Accept-Encoding", "br"), ("Accept-Encoding", "gzip")))


class TestGzipWriter:
    def test_output_decompresses(self) -> None:
        with GzipWriter() as writer:
            out = writer.write(b"hello ") + writer.write(b"world")
            out += writer.close()
        assert gzip.decompress(out) == b"hello world"

    def test_close_is_idempotent(self) -> None:
        writer = GzipWriter()
        writer.write(b"data")
        assert writer.close() != b""
        assert writer.closed
        assert writer.close() == b""

    def test_exit_closes(self) -> None:
        with GzipWriter() as writer:
            writer.write(b"data")
        assert writer.closed

    def test_exit_closes_on_error(self) -> None:
        writer = GzipWriter()
        with pytest.raises(RuntimeError), writer:
            writer.write(b"data")
            raise RuntimeError("boom")
        assert writer.closed

    def test_write_after_close_raises(self) -> None:
        writer = GzipWriter()
        writer.close()
        with pytest.raises(ValueError, match="closed"):
            writer.write(b"late")

    def test_output_is_deterministic(self) -> None:
        def compress() -> bytes:
            with GzipWriter() as writer:
                return writer.write(b"same bytes") + writer.close()

        assert compress() == compress()


class TestGzipMiddleware:
    async def test_compresses_when_accepted(self) -> None:
        async def handler(request: Request) -> Response:
            return Response(body=b"x" * 1000).with_header("Content-Length", "1000")

        response = await GzipMiddleware()(_request("gzip"), handler)

        assert isinstance(response, StreamingResponse)
        assert response.header("Content-Encoding") == "gzip"
        assert response.header("Content-Length") is None
        assert response.header("Vary") == "Accept-Encoding"
        assert gzip.decompress(await _collect(response)) == b"x" * 1000

    async def test_passes_through_without_accept_encoding(self) -> None:
        async def handler(request: Request) -> Response:
            return Response(body=b"plain")

        response = await GzipMiddleware()(_request(None), handler)

        assert isinstance(response, Response)
        assert response.body_bytes == b"plain"
        assert response.header("Content-Encoding") is None
        assert response.header("Vary") == "Accept-Encoding"

    async def test_compresses_streaming_responses(self) -> None:
        async def chunks():
            yield b"part one, "
            yield b"part two"

        async def handler(request: Request) -> StreamingResponse:
            return StreamingResponse(chunks=chunks())

        response = await GzipMiddleware()(_request(), handler)

        assert gzip.decompress(await _collect(response)) == b"part one, part two"

    async def test_compresses_sync_chunks(self) -> None:
        async def handler(request: Request) -> StreamingResponse:
            return StreamingResponse(chunks=iter([b"a", b"b"]))

        response = await GzipMiddleware()(_request(), handler)

        assert gzip.decompress(await _collect(response)) == b"ab"

    @pytest.mark.parametrize("status", [204, 206, 304])
    async def test_skips_statuses_without_full_body(self, status: int) -> None:
        async def handler(request: Request) -> Response:
            return Response(body=b"", status=status)

        response = await GzipMiddleware()(_request(), handler)

        assert isinstance(response, Response)
        assert response.header("Content-Encoding") is None

    async def test_skips_already_encoded(self) -> None:
        async def handler(request: Request) -> Response:
            return Response(body=b"...").with_header("Content-Encoding", "br")

        response = await GzipMiddleware()(_request(), handler)

        assert header_values(response, "Content-Encoding") == ["br"]

    async def test_appends_to_existing_vary(self) -> None:
        async def handler(request: Request) -> Response:
            return Response(body=b"...").with_header("Vary", "Origin")

        response = await GzipMiddleware()(_request(None), handler)

        assert header_values(response, "Vary") == ["Origin", "Accept-Encoding"]

    async def test_stream_error_still_finalizes_writer(self, monkeypatch) -> None:
        closed: list[bool] = []
        original_close = GzipWriter.close

        def tracking_close(self: GzipWriter) -> bytes:
            closed.append(self.closed)
            return original_close(self)

        monkeypatch.setattr(GzipWriter, "close", tracking_close)

        async def chunks():
            yield b"first"
            raise OSError("read failed")

        async def handler(request: Request) -> StreamingResponse:
            return StreamingResponse(chunks=chunks())

        response = await GzipMiddleware()(_request(), handler)
        with pytest.raises(OSError, match="read failed"):
            await _collect(response)

        # Closed once by the with block; it was still open when closed
        assert closed == [False]


class TestGzipThroughApp:
    async def test_decompressed_body_equals_plain_body(self, app) -> None:
        async with TestClient(app) as client:
            plain = await client.get("/app.js")
            compressed = await client.get("/app.js", headers={"Accept-Encoding": "gzip"})

        assert assert_gzip_body(compressed) == plain.body_bytes
        assert header_values(plain, "vary") == ["Accept-Encoding"]
        assert header_values(compressed, "vary") == ["Accept-Encoding"]

    async def test_compressed_response_is_chunked(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/", headers={"Accept-Encoding": "gzip, deflate, br"})

        assert response.header("content-length") is None
        assert response.header("transfer-encoding") == "chunked"

    async def test_repeated_requests_are_byte_identical(self, app) -> None:
        headers = {"Accept-Encoding": "gzip"}
        async with TestClient(app) as client:
            first = await client.get("/style.css", headers=headers)
            second = await client.get("/style.css", headers=headers)

        assert first.body_bytes == second.body_bytes

    async def test_malformed_header_is_uncompressed(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/app.js", headers={"Accept-Encoding": ";;q=;"})

        assert response.status == 200
        assert response.header("content-encoding") is None

    async def test_compression_can_be_disabled(self, make_app) -> None:
        async with TestClient(make_app(compression=False)) as client:
            response = await client.get("/app.js", headers={"Accept-Encoding": "gzip"})

        assert response.header("content-encoding") is None
        assert response.header("vary") is None
