"""Pytest configuration and shared fixtures."""

import pytest

from src.api.container import reset_container
from src.api.dependencies import limiter


@pytest.fixture(autouse=True)
def no_rate_limit():
    """API tests share one client address; keep the limiter out of the way."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def fresh_container():
    """Global container rebuilt for the test and discarded after it."""
    reset_container()
    yield
    reset_container()
