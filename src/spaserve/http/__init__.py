"""HTTP primitives: immutable request, chainable response, headers."""

from spaserve.http.headers import Headers
from spaserve.http.request import Request
from spaserve.http.response import Response, StreamingResponse

__all__ = ["Headers", "Request", "Response", "StreamingResponse"]
