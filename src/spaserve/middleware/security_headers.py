"""Security headers middleware — X-Content-Type-Options, Referrer-Policy, HSTS.

Adds the same three headers to every response, whatever the path,
status or content type: assets, the root document, 304s and error
responses alike.
"""

from spaserve.config import SecurityHeadersConfig
from spaserve.http.request import Request
from spaserve.middleware.protocol import AnyResponse, Next


class SecurityHeadersMiddleware:
    """Add security headers to every response.

    - X-Content-Type-Options — prevents MIME sniffing
    - Referrer-Policy — controls referrer leakage
    - Strict-Transport-Security — pins HTTPS, sub-domains, preload list

    Usage::

        from spaserve.middleware import SecurityHeadersMiddleware

        app.add_middleware(SecurityHeadersMiddleware())

    Or with custom config::

        from spaserve.config import SecurityHeadersConfig

        SecurityHeadersMiddleware(SecurityHeadersConfig(
            referrer_policy="no-referrer",
        ))
    """

    __slots__ = ("_headers", "config")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._headers = {
            "X-Content-Type-Options": self.config.x_content_type_options,
            "Referrer-Policy": self.config.referrer_policy,
            "Strict-Transport-Security": self.config.strict_transport_security,
        }

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        # Replace rather than duplicate anything an inner layer already set
        for name in self._headers:
            response = response.without_header(name)
        return response.with_headers(self._headers)
