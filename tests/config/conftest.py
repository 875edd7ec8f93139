"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "STAC_SOURCE_LOCATION", "STORAGE_ACCOUNT_NAME", "AZURE_STORAGE_CONNECTION_STRING",
        "ELASTIC_INDEX", "ELASTIC_ID", "ELASTIC_USERNAME", "ELASTIC_PASSWORD",
        "ELASTIC_BULK_CHUNK_SIZE", "ELASTIC_REQUEST_TIMEOUT",
        "INGEST_MAX_CONCURRENCY", "INGEST_DOCUMENT_EXTENSION", "INGEST_FAIL_ON_DROPPED",
        "LOG_LEVEL", "LOG_FORMAT", "DEBUG_LOGGING", "ENVIRONMENT",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
