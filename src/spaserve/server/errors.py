"""Error handling for spaserve requests.

Maps HTTPError exceptions and unexpected failures to plain-text
Response objects. Runs inside the middleware chain, so error responses
still receive the security headers.
"""

import logging

from spaserve.errors import HTTPError
from spaserve.http.request import Request
from spaserve.http.response import Response

logger = logging.getLogger("spaserve.server")

PLAIN_TEXT = "text/plain; charset=utf-8"


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a plain-text Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    resp = Response(body=detail + "\n", status=exc.status, content_type=PLAIN_TEXT)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    body = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body + "\n", status=500, content_type=PLAIN_TEXT)
