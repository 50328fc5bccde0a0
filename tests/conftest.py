"""Shared fixtures: a small built SPA on disk and in memory."""

from datetime import UTC, datetime

import pytest

from spaserve.app import App
from spaserve.assets import AssetTree
from spaserve.config import ServerConfig

INDEX_HTML = "<!doctype html><html><body><div id=root></div></body></html>"
APP_JS = "console.log('hello');" * 20
STAMP = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def dist_dir(tmp_path):
    """A built frontend: root document, hashed assets, nested files."""
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text(INDEX_HTML)
    (dist / "app.js").write_text(APP_JS)
    (dist / "style.css").write_text("body { color: red; }")
    (dist / ".well-known").mkdir()
    (dist / ".well-known" / "security.txt").write_text("Contact: mailto:sec@example.com")

    assets = dist / "assets"
    assets.mkdir()
    (assets / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (assets / "data.bin").write_bytes(b"\x00\x01\x02\x03")
    (assets / "index.html").write_text("<h1>Nested</h1>")
    return dist


@pytest.fixture
def tree() -> AssetTree:
    """The same SPA as an in-memory tree with a fixed modification time."""
    return AssetTree.from_mapping(
        {
            "index.html": INDEX_HTML,
            "app.js": APP_JS,
            "style.css": "body { color: red; }",
            "assets/logo.png": b"\x89PNG\r\n\x1a\n",
            "numbers.txt": "0123456789",
        },
        last_modified=STAMP,
    )


@pytest.fixture
def app(tree) -> App:
    return App(assets=tree)


@pytest.fixture
def make_app(tree):
    """Build an App over the in-memory tree with config overrides."""

    def _make(assets: AssetTree | None = None, **overrides: object) -> App:
        return App(ServerConfig(**overrides), assets=assets if assets is not None else tree)

    return _make
