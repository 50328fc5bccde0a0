"""Spaserve CLI — serve ./dist on port 8080.

Entry point registered as ``spaserve`` in ``pyproject.toml``::

    [project.scripts]
    spaserve = "spaserve.cli:main"

There are no configuration flags: the defaults in ``ServerConfig`` are
the deployed behavior. Embed ``App`` directly to change them.
"""

import argparse
import logging

from spaserve.config import ServerConfig
from spaserve.errors import ConfigurationError

logger = logging.getLogger("spaserve.server")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``spaserve`` command."""
    from spaserve import __version__

    parser = argparse.ArgumentParser(
        prog="spaserve",
        description="Serve a single-page app's built assets with SPA fallback routing.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.parse_args(argv)

    config = ServerConfig()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from spaserve.app import App

    try:
        app = App(config)
    except ConfigurationError as exc:
        logger.critical("Cannot start: %s", exc)
        raise SystemExit(1) from exc

    app.run()
