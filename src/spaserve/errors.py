"""Spaserve exception hierarchy.

Shared across the asset tree, the fallback policy, middleware and the
ASGI handler so every module raises and catches the same types.
"""

from dataclasses import dataclass


class SpaserveError(Exception):
    """Base for all spaserve-specific errors."""


class ConfigurationError(SpaserveError):
    """Raised when the server cannot be set up.

    Typically an asset tree that cannot be read. Fatal at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SpaserveError):
    """An error that maps directly to an HTTP status code.

    Raised by the fallback policy or middleware. The ASGI handler turns
    these into plain-text responses before middleware sees them.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing to serve for the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class AssetNotFound(NotFound):  # noqa: N818
    """404 — a path is absent from the asset tree.

    Kept distinct from "not an asset path" so the fallback policy can
    tell a failed lookup apart from a route.
    """

    def __init__(self, path: str) -> None:
        super().__init__(detail=f"{path} not found")
        object.__setattr__(self, "path", path)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — only GET and HEAD are served.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class PreconditionFailed(HTTPError):  # noqa: N818
    """412 — an ``If-Unmodified-Since`` check failed."""

    def __init__(self, detail: str = "Precondition Failed") -> None:
        super().__init__(status=412, detail=detail)


class RangeNotSatisfiable(HTTPError):  # noqa: N818
    """416 — the requested byte range lies outside the asset.

    Carries ``Content-Range: bytes */<size>`` as required for 416.
    """

    def __init__(self, size: int, detail: str = "Requested Range Not Satisfiable") -> None:
        super().__init__(
            status=416,
            detail=detail,
            headers=(("Content-Range", f"bytes */{size}"),),
        )
