"""Shared pytest fixtures."""

import pytest

from cluster_readiness.settings import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test against default settings read from a clean environment."""
    for var in ["CLUSTER_READINESS_DEFAULT_TIMEOUT", "CLUSTER_READINESS_DEFAULT_POLL_INTERVAL", "CLUSTER_READINESS_SERVICES"]:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
