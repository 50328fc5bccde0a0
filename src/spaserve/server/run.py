"""Server startup.

Starts a uvicorn ASGI server with the live spaserve App object.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spaserve.app import App

logger = logging.getLogger("spaserve.server")


def run_server(
    app: App,
    host: str = "0.0.0.0",
    port: int = 8080,
    *,
    log_level: str = "info",
) -> None:
    """Serve *app* with uvicorn until interrupted.

    uvicorn exits the process with status 1 when it cannot bind
    *host*:*port*, after logging the reason.

    Args:
        app: ASGI callable (spaserve App instance).
        host: Bind host address (default: all interfaces).
        port: Bind port number.
        log_level: uvicorn log level (debug, info, warning, error, critical).
    """
    import uvicorn

    logger.info("Serving %s on %s:%d", app.assets, host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level, lifespan="on")
