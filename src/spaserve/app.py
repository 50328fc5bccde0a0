"""Spaserve application class.

Owns the asset tree and the middleware chain. Mutable during setup
(extra middleware), frozen when ``app.run()`` or ``__call__()`` is
first invoked.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from spaserve._internal.asgi import Receive, Scope, Send
from spaserve.assets import AssetTree
from spaserve.config import ServerConfig
from spaserve.middleware.compression import GzipMiddleware
from spaserve.middleware.protocol import Middleware, Next
from spaserve.middleware.security_headers import SecurityHeadersMiddleware
from spaserve.server.handler import build_pipeline, handle_request
from spaserve.spa import SPAFallback

logger = logging.getLogger("spaserve.server")


def load_assets(config: ServerConfig) -> AssetTree:
    """Load the asset tree named by *config*.

    Raises:
        ConfigurationError: If the tree cannot be read.
    """
    if config.asset_package is not None:
        return AssetTree.from_package(config.asset_package, str(config.asset_dir))
    return AssetTree.from_directory(config.asset_dir)


class App:
    """The spaserve application.

    The asset tree is loaded once, here, and never reloaded. The chain
    is fixed: security headers outermost, then compression, then any
    middleware added with ``add_middleware()``, then the SPA fallback
    policy::

        app = App(ServerConfig(asset_dir="build"))
        app.run()

    Thread safety:
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread builds the pipeline, even if several ASGI workers
        call ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_pipeline",
        "assets",
        "config",
    )

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        assets: AssetTree | None = None,
    ) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self.assets: AssetTree = assets if assets is not None else load_assets(self.config)
        self._middleware_list: list[Middleware] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._pipeline: Next | None = None

        if self.config.index.lstrip("/") not in self.assets:
            logger.warning(
                "%s has no %s; every request will 404", self.assets, self.config.index
            )

    # -- Setup --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add middleware between compression and the fallback policy."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with uvicorn.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        self._ensure_frozen()

        from spaserve.server.run import run_server

        run_server(
            self,
            self.config.host if host is None else host,
            self.config.port if port is None else port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._pipeline is not None

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request) and
        signals completion back to the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the request pipeline.

        MUST only be called while holding _freeze_lock.
        """
        middleware: list[Callable[..., Any]] = [
            SecurityHeadersMiddleware(self.config.security),
        ]
        if self.config.compression:
            middleware.append(GzipMiddleware(self.config.compress_level))
        middleware.extend(self._middleware_list)

        endpoint = SPAFallback.from_config(self.assets, self.config)
        self._pipeline = build_pipeline(endpoint, tuple(middleware), debug=self.config.debug)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Add middleware before calling app.run()."
            )
            raise RuntimeError(msg)
