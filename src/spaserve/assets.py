"""Read-only asset tree and path resolution.

The tree maps relative paths (forward slashes, no leading slash) to
immutable ``Asset`` records. It is loaded once at startup from a
directory, from files bundled in a Python package, or from an in-memory
mapping, and is never mutated afterwards. Concurrent readers need no
locking.

Request paths are cleaned lexically before lookup, so ``..`` segments
can never climb out of the tree.
"""

from __future__ import annotations

import logging
import mimetypes
import posixpath
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType

from spaserve.errors import AssetNotFound, ConfigurationError

logger = logging.getLogger("spaserve.assets")


def normalize_path(path: str) -> str:
    """Lexically clean a request path.

    Collapses ``.``, ``..`` and repeated separators, drops a trailing
    slash, and always returns a path rooted at ``/``::

        >>> normalize_path("/a/./b/../c/")
        '/a/c'
        >>> normalize_path("/../../etc/passwd")
        '/etc/passwd'
    """
    cleaned = posixpath.normpath("/" + path)
    # normpath keeps a leading "//" (POSIX allows it to mean something)
    return "/" + cleaned.lstrip("/")


def is_asset_path(path: str) -> bool:
    """True if the last segment of *path* contains a dot.

    ``/app.js`` and ``/img/logo.v2.png`` are asset paths;
    ``/dashboard/42`` is an application route.
    """
    return "." in posixpath.basename(normalize_path(path))


def guess_content_type(name: str) -> str:
    """Content type for *name* by extension, utf-8 for text types."""
    content_type, _ = mimetypes.guess_type(name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/"):
        return f"{content_type}; charset=utf-8"
    return content_type


@dataclass(frozen=True, slots=True)
class Asset:
    """One file of the asset tree."""

    name: str
    data: bytes
    last_modified: datetime
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class AssetTree(Mapping[str, Asset]):
    """Immutable mapping of relative path to ``Asset``.

    Build one with ``from_directory()``, ``from_package()`` or
    ``from_mapping()``::

        tree = AssetTree.from_directory("dist")
        asset = tree.open("/assets/app.3f9c.js")
    """

    __slots__ = ("_assets", "source")

    def __init__(self, assets: Mapping[str, Asset], *, source: str = "<memory>") -> None:
        self._assets: Mapping[str, Asset] = MappingProxyType(dict(assets))
        self.source = source

    def __getitem__(self, key: str) -> Asset:
        return self._assets[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetTree({self.source!r}, {len(self)} assets)"

    def open(self, path: str) -> Asset:
        """Resolve a request path to an asset.

        Raises:
            AssetNotFound: If the normalized path is not in the tree.
        """
        key = normalize_path(path).lstrip("/")
        asset = self._assets.get(key) if key else None
        if asset is None:
            raise AssetNotFound(key or "/")
        return asset

    # -- Loaders --

    @classmethod
    def from_mapping(
        cls,
        files: Mapping[str, str | bytes],
        *,
        last_modified: datetime | None = None,
    ) -> AssetTree:
        """Build a tree from in-memory contents (``str`` is utf-8 encoded)."""
        stamp = _whole_seconds(last_modified or datetime.now(UTC))
        assets: dict[str, Asset] = {}
        for name, content in files.items():
            key = normalize_path(name).lstrip("/")
            data = content.encode("utf-8") if isinstance(content, str) else content
            assets[key] = Asset(key, data, stamp, guess_content_type(key))
        return cls(assets)

    @classmethod
    def from_directory(cls, directory: str | Path) -> AssetTree:
        """Load every regular file under *directory*, dot-files included.

        Raises:
            ConfigurationError: If the directory is missing or unreadable.
        """
        root = Path(directory)
        if not root.is_dir():
            msg = f"Asset directory not found: {root}"
            raise ConfigurationError(msg)

        assets: dict[str, Asset] = {}
        try:
            for file_path in sorted(root.rglob("*")):
                if not file_path.is_file():
                    continue
                key = file_path.relative_to(root).as_posix()
                stamp = datetime.fromtimestamp(int(file_path.stat().st_mtime), UTC)
                assets[key] = Asset(key, file_path.read_bytes(), stamp, guess_content_type(key))
        except OSError as exc:
            msg = f"Cannot read asset directory {root}: {exc}"
            raise ConfigurationError(msg) from exc

        logger.debug("Loaded %d assets from %s", len(assets), root)
        return cls(assets, source=str(root))

    @classmethod
    def from_package(cls, package: str, subdir: str = "dist") -> AssetTree:
        """Load files bundled inside an installed package.

        Resources carry no reliable modification time, so every asset is
        stamped with the load time.

        Raises:
            ConfigurationError: If the package or the directory is missing.
        """
        try:
            root = resources.files(package).joinpath(subdir)
        except ModuleNotFoundError as exc:
            msg = f"Asset package not found: {package}"
            raise ConfigurationError(msg) from exc
        if not root.is_dir():
            msg = f"Asset directory {subdir!r} not found in package {package}"
            raise ConfigurationError(msg)

        stamp = _whole_seconds(datetime.now(UTC))
        assets: dict[str, Asset] = {}
        try:
            for key, entry in _walk(root, ""):
                assets[key] = Asset(key, entry.read_bytes(), stamp, guess_content_type(key))
        except OSError as exc:
            msg = f"Cannot read assets from package {package}: {exc}"
            raise ConfigurationError(msg) from exc

        logger.debug("Loaded %d assets from %s/%s", len(assets), package, subdir)
        return cls(assets, source=f"{package}:{subdir}")


def _walk(node: Traversable, prefix: str) -> Iterator[tuple[str, Traversable]]:
    for child in sorted(node.iterdir(), key=lambda entry: entry.name):
        key = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _walk(child, f"{key}/")
        elif child.is_file():
            yield key, child


def _whole_seconds(stamp: datetime) -> datetime:
    # HTTP dates have one-second resolution
    return stamp.replace(microsecond=0)
