"""Server configuration.

ServerConfig is a frozen dataclass, immutable after creation. There is
no environment or flag layer: the defaults are the deployed behavior.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Values for the headers added to every response.

    All values are applied as-is. Use standard header values.
    """

    x_content_type_options: str = "nosniff"
    referrer_policy: str = "strict-origin-when-cross-origin"
    strict_transport_security: str = "max-age=63072000; includeSubDomains; preload"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(asset_dir="build", port=3000)
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "info"

    # Asset tree: a package resource directory wins over a filesystem path
    asset_dir: str | Path = "dist"
    asset_package: str | None = None
    index: str = "index.html"

    # Caching
    asset_cache_control: str = "public, max-age=31536000, immutable"
    document_cache_control: str = "no-store"

    # Missing asset-shaped paths (e.g. /missing.png) 404 instead of
    # falling back to the root document
    strict_assets: bool = False

    # Compression
    compression: bool = True
    compress_level: int = 6

    # Security headers
    security: SecurityHeadersConfig = field(default_factory=SecurityHeadersConfig)
