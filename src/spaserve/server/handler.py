"""ASGI handler — translates ASGI scope/messages to spaserve types.

The only component that touches raw ASGI request scopes directly.
Converts scope dicts to typed Request objects, dispatches through the
middleware chain and the fallback policy, and sends the Response back
through ASGI send().
"""

from collections.abc import Awaitable, Callable
from typing import Any

from spaserve._internal.asgi import Receive, Scope, Send
from spaserve.errors import HTTPError
from spaserve.http.request import Request
from spaserve.http.response import StreamingResponse
from spaserve.middleware.protocol import AnyResponse, Next
from spaserve.server.errors import handle_http_error, handle_internal_error
from spaserve.server.sender import send_response, send_streaming_response


def _guarded(inner: Next, *, debug: bool) -> Next:
    """Turn anything *inner* raises into a response."""

    async def call(req: Request) -> AnyResponse:
        try:
            return await inner(req)
        except HTTPError as exc:
            return handle_http_error(exc, req)
        except Exception as exc:
            return handle_internal_error(exc, req, debug=debug)

    return call


def build_pipeline(
    endpoint: Callable[[Request], Awaitable[AnyResponse]],
    middleware: tuple[Callable[..., Any], ...],
    *,
    debug: bool = False,
) -> Next:
    """Wrap *endpoint* in *middleware*, first entry outermost.

    Errors raised by the endpoint or by a middleware become responses
    before the next layer out sees them, so every layer (security
    headers included) handles a real response.
    """
    handler: Next = _guarded(endpoint, debug=debug)
    for mw in reversed(middleware):
        outer = handler
        mw_ref = mw

        async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> AnyResponse:
            return await _mw(req, _next)

        handler = _guarded(make_next, debug=debug)

    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,  # noqa: ARG001
    send: Send,
    *,
    pipeline: Next,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    response = await pipeline(request)

    if isinstance(response, StreamingResponse):
        await send_streaming_response(response, send, head=request.is_head)
    else:
        await send_response(response, send, head=request.is_head)
