"""Spaserve — serve a single-page app's static assets over ASGI.

Assets are loaded once into an immutable tree. Asset-shaped paths are
served with year-long immutable caching; every other path gets the
never-cached root document so client-side routing can take over.
Responses are gzip-compressed for clients that accept it and always
carry baseline security headers.

Basic usage::

    from spaserve import App, ServerConfig

    app = App(ServerConfig(asset_dir="dist"))
    app.run()

Or as an ASGI app under any server::

    app = App()  # uvicorn myproject:app
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "Asset",
    "AssetNotFound",
    "AssetTree",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "Response",
    "SPAFallback",
    "SecurityHeadersConfig",
    "ServerConfig",
    "SpaserveError",
    "StreamingResponse",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import spaserve`` fast while providing a clean top-level API.
    """
    if name == "App":
        from spaserve.app import App

        return App

    if name in ("ServerConfig", "SecurityHeadersConfig"):
        from spaserve import config

        return getattr(config, name)

    if name in ("Asset", "AssetTree"):
        from spaserve import assets

        return getattr(assets, name)

    if name == "SPAFallback":
        from spaserve.spa import SPAFallback

        return SPAFallback

    if name in ("Request", "Response", "StreamingResponse"):
        from spaserve import http

        return getattr(http, name)

    if name in (
        "AssetNotFound",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "SpaserveError",
    ):
        from spaserve import errors

        return getattr(errors, name)

    msg = f"module 'spaserve' has no attribute {name!r}"
    raise AttributeError(msg)
