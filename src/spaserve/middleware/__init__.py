"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> AnyResponse

Built-in middleware:
    GzipMiddleware -- gzip-encode responses for clients that accept it
    SecurityHeadersMiddleware -- X-Content-Type-Options, Referrer-Policy, HSTS
"""

from spaserve.middleware.compression import GzipMiddleware, GzipWriter, accepts_gzip
from spaserve.middleware.protocol import AnyResponse, Middleware, Next
from spaserve.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "AnyResponse",
    "GzipMiddleware",
    "GzipWriter",
    "Middleware",
    "Next",
    "SecurityHeadersMiddleware",
    "accepts_gzip",
]
