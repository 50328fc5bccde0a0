"""Immutable HTTP request.

Frozen metadata only. Every request spaserve answers is a GET or HEAD,
so the body is never read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from spaserve.assets import normalize_path
from spaserve.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the decoded path as the server received it.
    ``clean_path`` is the lexically normalized form the fallback policy
    and the asset tree work with.
    """

    method: str
    path: str
    clean_path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def is_head(self) -> bool:
        """True for HEAD requests (headers only, no body)."""
        return self.method == "HEAD"

    @property
    def accept_encoding(self) -> str | None:
        """The raw Accept-Encoding header value."""
        return self.headers.get("accept-encoding")

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        server = scope.get("server")
        client = scope.get("client")
        path = scope.get("path") or "/"
        return cls(
            method=scope["method"].upper(),
            path=path,
            clean_path=normalize_path(path),
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
