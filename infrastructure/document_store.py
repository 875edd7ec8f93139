# ============================================================================
# DOCUMENT STORE
# ============================================================================
# STATUS: Infrastructure - object store access for STAC documents
# PURPOSE: List keys under a root, read raw bytes, resolve relative references
# EXPORTS: IDocumentStore, BlobDocumentStore, LocalDocumentStore,
#          create_document_store, split_blob_key
# DEPENDENCIES: azure-storage-blob (aio), azure-identity (aio), aiohttp
# SOURCE: Azure Blob Storage container or local directory tree
# PATTERNS: Interface + implementations, DefaultAzureCredential, async context
# ============================================================================

"""
Document Store - Read-Only Object Store Adapter

Keys are full locations so that a key can be written into a document's
self link and used as the index ``_id`` unchanged:

    abfs://<container>/<blob path>     BlobDocumentStore
    <directory>/<relative path>        LocalDocumentStore

Authentication (blob):
1. AZURE_STORAGE_CONNECTION_STRING when set
2. DefaultAzureCredential against STORAGE_ACCOUNT_NAME otherwise
   (environment variables, managed identity, Azure CLI, ...)

Usage:
    async with create_document_store(root, config.storage) as store:
        async for key in store.list(root):
            data = await store.read(key)
"""

# ============================================================================
# IMPORTS - Top of file for fail-fast behavior
# ============================================================================

# Standard library imports
import asyncio
import os
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, List, Optional, Tuple

# Azure SDK imports - These will fail fast if not installed
from azure.core.exceptions import AzureError, ResourceNotFoundError as AzureResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential
from azure.storage.blob.aio import BlobServiceClient

# Application imports
from config.defaults import StorageDefaults
from config.storage_config import StorageConfig
from exceptions import (
    ConfigurationError,
    DocumentNotFoundError,
    ResourceNotFoundError,
    StorageReadError,
)
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "DocumentStore")


def split_blob_key(key: str) -> Tuple[str, str]:
    """
    Split ``abfs://container/path`` into container and blob path.

    Expected format: abfs://container/prefix or abfs://container

    Raises:
        ValueError: If the key does not use the blob scheme
    """
    if not key.startswith(StorageDefaults.BLOB_SCHEME_PREFIX):
        raise ValueError(f"Not a blob key: {key}")
    parts = key[len(StorageDefaults.BLOB_SCHEME_PREFIX):].split("/", 1)
    return parts[0], parts[1] if len(parts) > 1 else ""


# ============================================================================
# DOCUMENT STORE INTERFACE
# ============================================================================

class IDocumentStore(ABC):
    """
    Interface for read-only document storage.

    Enables dependency injection and testing with in-memory stores.
    Listing is a fresh scan on every call; nothing is cached.
    """

    # Absolute prefix of this store's keys (None when keys are plain paths)
    scheme_prefix: Optional[str] = None

    @abstractmethod
    def list(self, root: str) -> AsyncIterator[str]:
        """Yield every key under root, in no particular order."""
        pass

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """
        Read the full content of one key.

        Raises:
            DocumentNotFoundError: Key does not exist
            StorageReadError: Any other read failure
        """
        pass

    def join(self, directory: str, relative: str) -> str:
        """
        Resolve a relative reference against a directory key.

        POSIX-style: ``.`` and ``..`` segments are collapsed and references
        that are already absolute come back unchanged. For scheme-prefixed
        keys the first segment after the scheme (the container) is the root:
        ``..`` never climbs above it.
        """
        if "://" in relative or relative.startswith("/"):
            return relative

        if self.scheme_prefix and directory.startswith(self.scheme_prefix):
            container, _, blob_directory = directory[len(self.scheme_prefix):].partition("/")
            blob_path = posixpath.normpath(posixpath.join("/", blob_directory, relative)).lstrip("/")
            return f"{self.scheme_prefix}{container}/{blob_path}" if blob_path else f"{self.scheme_prefix}{container}"

        joined = posixpath.normpath(posixpath.join(directory, relative)) if directory else posixpath.normpath(relative)
        if joined == ".":
            joined = directory
        return joined

    async def close(self) -> None:
        """Release clients (no-op for stores without connections)."""
        return None

    async def __aenter__(self) -> "IDocumentStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


# ============================================================================
# BLOB DOCUMENT STORE
# ============================================================================

class BlobDocumentStore(IDocumentStore):
    """
    Azure Blob Storage document store.

    One BlobServiceClient per store instance; container clients are cached
    per container name for connection reuse.
    """

    scheme_prefix = StorageDefaults.BLOB_SCHEME_PREFIX

    def __init__(self, connection_string: Optional[str] = None, account_url: Optional[str] = None):
        if connection_string:
            self._credential = None
            self._service_client = BlobServiceClient.from_connection_string(connection_string)
            logger.info("BlobDocumentStore using connection string")
        elif account_url:
            self._credential = DefaultAzureCredential()
            self._service_client = BlobServiceClient(account_url=account_url, credential=self._credential)
            logger.info(f"BlobDocumentStore using DefaultAzureCredential for {account_url}")
        else:
            raise ConfigurationError("BlobDocumentStore needs a connection string or an account URL")

        self._container_clients = {}

    def _get_container_client(self, container: str):
        if container not in self._container_clients:
            self._container_clients[container] = self._service_client.get_container_client(container)
        return self._container_clients[container]

    async def list(self, root: str) -> AsyncIterator[str]:
        container, prefix = split_blob_key(root)
        if prefix and not prefix.endswith("/"):
            prefix = f"{prefix}/"

        container_client = self._get_container_client(container)
        logger.debug(f"Listing blobs: {container}/{prefix}")
        try:
            async for blob in container_client.list_blobs(name_starts_with=prefix or None):
                yield f"{self.scheme_prefix}{container}/{blob.name}"
        except AzureResourceNotFoundError:
            raise ResourceNotFoundError(f"Container not found: {container}")

    async def read(self, key: str) -> bytes:
        try:
            container, blob_path = split_blob_key(key)
        except ValueError as e:
            raise StorageReadError(key, str(e))

        logger.debug(f"Reading blob: {container}/{blob_path}",
                     extra={'custom_dimensions': {'source_key': key}})
        try:
            blob_client = self._get_container_client(container).get_blob_client(blob_path)
            downloader = await blob_client.download_blob()
            return await downloader.readall()
        except AzureResourceNotFoundError:
            raise DocumentNotFoundError(key)
        except AzureError as e:
            raise StorageReadError(key, str(e))

    async def close(self) -> None:
        await self._service_client.close()
        if self._credential is not None:
            await self._credential.close()


# ============================================================================
# LOCAL DOCUMENT STORE
# ============================================================================

class LocalDocumentStore(IDocumentStore):
    """Directory tree on local disk. Filesystem calls run in a worker thread."""

    @staticmethod
    def _scan(root: str) -> List[str]:
        if not os.path.isdir(root):
            raise ResourceNotFoundError(f"Source directory not found: {root}")
        keys = []
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                keys.append(Path(dirpath, filename).as_posix())
        return keys

    async def list(self, root: str) -> AsyncIterator[str]:
        logger.debug(f"Scanning directory: {root}")
        for key in await asyncio.to_thread(self._scan, root):
            yield key

    async def read(self, key: str) -> bytes:
        logger.debug(f"Reading file: {key}", extra={'custom_dimensions': {'source_key': key}})
        try:
            return await asyncio.to_thread(Path(key).read_bytes)
        except FileNotFoundError:
            raise DocumentNotFoundError(key)
        except OSError as e:
            raise StorageReadError(key, str(e))


# ============================================================================
# FACTORY
# ============================================================================

def create_document_store(root: str, storage_config: StorageConfig) -> IDocumentStore:
    """
    Choose a store implementation from the root's scheme.

    Raises:
        ConfigurationError: Unsupported scheme, or blob root without credentials
    """
    if root.startswith(StorageDefaults.BLOB_SCHEME_PREFIX):
        return BlobDocumentStore(
            connection_string=storage_config.connection_string,
            account_url=storage_config.account_url,
        )
    if "://" in root:
        raise ConfigurationError(f"Unsupported source scheme: {root}")
    return LocalDocumentStore()
