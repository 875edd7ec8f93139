"""
Infrastructure Package - Lazy Loading Implementation.

Adapters import the Azure and Elasticsearch SDKs at module level. Imports
are deferred until a name is first accessed so that importing the package
(for example from tests that use in-memory fakes) does not pull in either
SDK or read the environment.

Exports:
    IDocumentStore, BlobDocumentStore, LocalDocumentStore, create_document_store
    ISearchIndex, ElasticsearchIndex
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .document_store import IDocumentStore as _IDocumentStore
    from .document_store import BlobDocumentStore as _BlobDocumentStore
    from .document_store import LocalDocumentStore as _LocalDocumentStore
    from .search_index import ISearchIndex as _ISearchIndex
    from .search_index import ElasticsearchIndex as _ElasticsearchIndex


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    # Document store
    if name in ("IDocumentStore", "BlobDocumentStore", "LocalDocumentStore", "create_document_store"):
        from . import document_store
        return getattr(document_store, name)

    # Search index
    elif name in ("ISearchIndex", "ElasticsearchIndex"):
        from . import search_index
        return getattr(search_index, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "IDocumentStore",
    "BlobDocumentStore",
    "LocalDocumentStore",
    "create_document_store",
    "ISearchIndex",
    "ElasticsearchIndex",
]
