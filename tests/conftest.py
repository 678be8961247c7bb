"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import pytest

sys.path.append(os.path.join(os.getcwd(), "src"))

from searchcluster.cluster.health import default_health_store


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> None:
    """Set up test environment variables."""
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("SEARCH_ELASTIC_NAMESPACE", "phabricator")


@pytest.fixture(autouse=True)
def reset_health_store():
    """Health state is process-wide; isolate it per test."""
    default_health_store.clear()
    yield
    default_health_store.clear()
