"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> AnyResponse: ...

No base class required. The server checks the shape, not the lineage.

The ``next`` callable may return ``Response`` or ``StreamingResponse``.
Both share the ``.with_header()`` / ``.without_header()`` chainable API,
so middleware can modify them uniformly.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from spaserve.http.request import Request
from spaserve.http.response import Response, StreamingResponse

# Any response type the pipeline can produce
AnyResponse: TypeAlias = Response | StreamingResponse

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for spaserve middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> AnyResponse:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("Server-Timing", f"app;dur={elapsed * 1000:.1f}")

        # Class middleware
        class PoweredBy:
            async def __call__(self, request: Request, next: Next) -> AnyResponse:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
