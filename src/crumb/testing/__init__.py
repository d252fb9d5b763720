"""Test utilities for crumb applications.

    from crumb.testing import TestClient, cookie_header
"""

from crumb.testing.client import TestClient, cookie_header

__all__ = ["TestClient", "cookie_header"]
