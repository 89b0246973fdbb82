"""Test utilities for axium applications::

    from axium.testing import TestClient
"""

from axium.testing.client import TestClient

__all__ = ["TestClient"]
