"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without Azure credentials or an Elasticsearch cluster.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tests.factories.config_factories import make_cloud_id  # noqa: E402


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so configuration can be built.

    Tests that need a specific environment use monkeypatch on top of these.
    """
    defaults = {
        "ENVIRONMENT": "test",
        "LOG_FORMAT": "json",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture
def ingest_env(monkeypatch, tmp_path):
    """Complete, valid environment pointing at an empty local directory."""
    monkeypatch.setenv("STAC_SOURCE_LOCATION", tmp_path.as_posix())
    monkeypatch.setenv("ELASTIC_INDEX", "stac-test")
    monkeypatch.setenv("ELASTIC_ID", make_cloud_id("test-deployment"))
    monkeypatch.setenv("ELASTIC_USERNAME", "writer")
    monkeypatch.setenv("ELASTIC_PASSWORD", "secret")
    return monkeypatch
