"""Test utilities for spaserve applications.

Provides an in-process test client and response assertions::

    from spaserve.testing import TestClient, assert_security_headers
"""

from spaserve.testing.assertions import (
    assert_cache_control,
    assert_gzip_body,
    assert_security_headers,
    header_values,
)
from spaserve.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_cache_control",
    "assert_gzip_body",
    "assert_security_headers",
    "header_values",
]
