"""ASGI response sending — translates spaserve Response types to ASGI messages.

Handles both standard single-body responses and chunked streaming
responses. HEAD requests get the headers a GET would get and no body.
"""

import logging
from collections.abc import AsyncIterator

from spaserve._internal.asgi import Send
from spaserve.http.response import Response, StreamingResponse

logger = logging.getLogger("spaserve.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _raw_headers(response: Response | StreamingResponse) -> list[tuple[bytes, bytes]]:
    raw_headers: list[tuple[bytes, bytes]] = []
    if response.content_type:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    return raw_headers


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a spaserve Response into ASGI send() calls."""
    raw_headers = _raw_headers(response)

    body = response.body_bytes if _body_allowed(response.status) else b""

    # 1xx, 204 and 304 carry no Content-Length of their own
    if _body_allowed(response.status) and response.header("Content-Length") is None:
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


async def send_streaming_response(
    response: StreamingResponse,
    send: Send,
    *,
    head: bool = False,
) -> None:
    """Send a streaming response via chunked transfer encoding.

    Sends headers immediately, then each chunk as an ASGI body
    message with ``more_body=True``. Closes with an empty body.
    A failure mid-stream is logged and the body is cut short; a
    client that went away ends the stream quietly.
    """
    raw_headers = _raw_headers(response)
    # No content-length: chunked transfer encoding signals body boundaries
    raw_headers.append((b"transfer-encoding", b"chunked"))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )

    disconnected = False
    try:
        if not head and _body_allowed(response.status):
            disconnected = await _send_chunks(response, send)
    except Exception:
        logger.exception("Response stream failed after headers were sent")
    finally:
        aclose = getattr(response.chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    if disconnected:
        return

    # Close the stream
    await send(
        {
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        }
    )


async def _send_chunks(response: StreamingResponse, send: Send) -> bool:
    """Send every chunk. Returns True if the client went away.

    Only ``send()`` failures count as a disconnect; an error raised while
    producing a chunk propagates to the caller.
    """
    if isinstance(response.chunks, AsyncIterator):
        async for chunk in response.chunks:
            if not await _send_chunk(chunk, send):
                return True
    else:
        for chunk in response.chunks:
            if not await _send_chunk(chunk, send):
                return True
    return False


async def _send_chunk(chunk: str | bytes, send: Send) -> bool:
    if not chunk:
        return True
    body = chunk.encode("utf-8") if isinstance(chunk, str) else chunk
    try:
        await send({"type": "http.response.body", "body": body, "more_body": True})
    except OSError as exc:
        logger.debug("Client disconnected mid-stream: %s", exc)
        return False
    return True
