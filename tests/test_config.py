"""Tests for spaserve.config — frozen server configuration."""

import dataclasses

import pytest

from spaserve.config import SecurityHeadersConfig, ServerConfig


class TestServerConfig:
    def test_defaults(self) -> None:
        config = ServerConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.asset_dir == "dist"
        assert config.asset_package is None
        assert config.index == "index.html"
        assert config.asset_cache_control == "public, max-age=31536000, immutable"
        assert config.document_cache_control == "no-store"
        assert config.strict_assets is False
        assert config.compression is True
        assert config.compress_level == 6
        assert config.debug is False
        assert config.log_level == "info"

    def test_frozen(self) -> None:
        config = ServerConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 9000  # type: ignore[misc]

    def test_replace(self) -> None:
        config = dataclasses.replace(ServerConfig(), port=9000, strict_assets=True)
        assert config.port == 9000
        assert config.strict_assets is True

    def test_security_defaults_not_shared(self) -> None:
        assert ServerConfig().security == SecurityHeadersConfig()
        assert ServerConfig().security is not ServerConfig().security


class TestSecurityHeadersConfig:
    def test_defaults(self) -> None:
        config = SecurityHeadersConfig()
        assert config.x_content_type_options == "nosniff"
        assert config.referrer_policy == "strict-origin-when-cross-origin"
        assert config.strict_transport_security == "max-age=63072000; includeSubDomains; preload"
