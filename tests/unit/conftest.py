"""
Unit test fixtures: factory-built documents and in-memory adapters.
"""

import pytest

from services.stac_normalizer import StacNormalizer
from tests.factories.fakes import InMemoryDocumentStore, RecordingSearchIndex
from tests.factories.stac_factories import FIXED_NOW, make_stac_item, make_stac_collection


@pytest.fixture
def stac_item():
    """Return randomized STAC item dict."""
    return make_stac_item()


@pytest.fixture
def stac_collection():
    """Return randomized STAC collection dict."""
    return make_stac_collection()


@pytest.fixture
def memory_store():
    """Empty in-memory store; tests fill ``documents``."""
    return InMemoryDocumentStore()


@pytest.fixture
def normalizer(memory_store):
    """Normalizer bound to the in-memory store with a fixed clock."""
    return StacNormalizer(memory_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def recording_index():
    return RecordingSearchIndex()
