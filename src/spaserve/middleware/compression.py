"""Gzip compression middleware.

Compresses response bodies for clients that advertise gzip in
``Accept-Encoding``. Compressed bodies are streamed: the final length is
unknown before the last chunk, so any ``Content-Length`` is dropped and
the transport falls back to chunked framing.

Compression is best-effort. A missing or malformed ``Accept-Encoding``
means "no compression", never an error.
"""

import gzip
import io
from collections.abc import AsyncIterator
from typing import Self

from spaserve.http.headers import Headers
from spaserve.http.request import Request
from spaserve.http.response import Response, StreamingResponse
from spaserve.middleware.protocol import AnyResponse, Next

_GZIP_CODINGS = frozenset({"gzip", "x-gzip"})

# No body (204, 304) or a slice of a representation (206)
_SKIP_STATUSES = frozenset({204, 206, 304})


def accepts_gzip(headers: Headers) -> bool:
    """True if ``Accept-Encoding`` allows gzip.

    An explicit ``gzip``/``x-gzip`` entry decides; otherwise ``*`` does.
    A ``q`` of zero or a malformed ``q`` counts as refusal.
    """
    explicit: float | None = None
    wildcard: float | None = None
    for token in headers.get_tokens("accept-encoding"):
        coding, *params = token.split(";")
        coding = coding.strip().lower()
        if coding not in _GZIP_CODINGS and coding != "*":
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() != "q":
                continue
            try:
                quality = float(value.strip())
            except ValueError:
                quality = 0.0
        if coding == "*":
            wildcard = quality
        else:
            explicit = max(quality, explicit or 0.0)
    if explicit is not None:
        return explicit > 0
    return wildcard is not None and wildcard > 0


class GzipWriter:
    """Incremental gzip compressor.

    ``write()`` returns whatever compressed bytes are ready; ``close()``
    returns the rest plus the gzip trailer. Closing is idempotent, and
    leaving the ``with`` block always closes::

        with GzipWriter() as writer:
            out = writer.write(b"hello")
            out += writer.close()
    """

    __slots__ = ("_buffer", "_file")

    def __init__(self, compress_level: int = 6) -> None:
        self._buffer = io.BytesIO()
        # mtime=0 keeps the output byte-identical across requests
        self._file: gzip.GzipFile | None = gzip.GzipFile(
            mode="wb", fileobj=self._buffer, compresslevel=compress_level, mtime=0
        )

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, data: bytes) -> bytes:
        if self._file is None:
            msg = "write to a closed GzipWriter"
            raise ValueError(msg)
        self._file.write(data)
        return self._drain()

    def close(self) -> bytes:
        if self._file is None:
            return b""
        gzip_file, self._file = self._file, None
        gzip_file.close()
        return self._drain()

    def _drain(self) -> bytes:
        data = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate()
        return data

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


async def _body_chunks(response: AnyResponse) -> AsyncIterator[bytes]:
    if isinstance(response, Response):
        yield response.body_bytes
        return
    if isinstance(response.chunks, AsyncIterator):
        async for chunk in response.chunks:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk
    else:
        for chunk in response.chunks:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


async def _compress(chunks: AsyncIterator[bytes], compress_level: int) -> AsyncIterator[bytes]:
    with GzipWriter(compress_level) as writer:
        async for chunk in chunks:
            data = writer.write(chunk)
            if data:
                yield data
        yield writer.close()


def _compressible(response: AnyResponse) -> bool:
    if response.status in _SKIP_STATUSES or 100 <= response.status < 200:
        return False
    return response.header("Content-Encoding") is None


class GzipMiddleware:
    """Gzip-encode responses for clients that accept it.

    Every response gets ``Vary: Accept-Encoding`` so shared caches key
    on the header. Compressed responses also get
    ``Content-Encoding: gzip`` and lose ``Content-Length``.

    Usage::

        from spaserve.middleware import GzipMiddleware

        app.add_middleware(GzipMiddleware(compress_level=9))
    """

    __slots__ = ("compress_level",)

    def __init__(self, compress_level: int = 6) -> None:
        self.compress_level = compress_level

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = (await next(request)).with_header("Vary", "Accept-Encoding")
        if not accepts_gzip(request.headers) or not _compressible(response):
            return response

        headers = response.without_header("Content-Length").headers
        return StreamingResponse(
            chunks=_compress(_body_chunks(response), self.compress_level),
            status=response.status,
            content_type=response.content_type,
            headers=(*headers, ("Content-Encoding", "gzip")),
        )
