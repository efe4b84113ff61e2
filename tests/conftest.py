"""Shared fixtures for the neighborhood scores test suite.

Provides a Flask test client with rate limiting turned off.
"""

import os

import pytest

# Never report test errors to Sentry
os.environ.pop("SENTRY_DSN", None)

from app import app, limiter  # noqa: E402


@pytest.fixture()
def client():
    """Flask test client with rate limiting off (we're testing logic, not limits)."""
    app.config["TESTING"] = True
    limiter.enabled = False
    with app.test_client() as c:
        yield c
