# ============================================================================
# STORAGE CONFIGURATION
# ============================================================================
# STATUS: Configuration - object store source settings
# PURPOSE: Where STAC documents are read from and how to authenticate
# EXPORTS: StorageConfig
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables (STAC_SOURCE_LOCATION, STORAGE_ACCOUNT_NAME,
#         AZURE_STORAGE_CONNECTION_STRING)
# ============================================================================

"""
Object Store Configuration.

Two kinds of source location are supported:
    - abfs://<container>/<prefix>  Azure Blob Storage
    - a plain directory path       local disk (development and fixtures)

Blob sources authenticate with a connection string when one is set,
otherwise with DefaultAzureCredential against STORAGE_ACCOUNT_NAME.
"""

import os
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from .defaults import StorageDefaults


class StorageConfig(BaseModel):
    """
    Source object store configuration.

    Attributes:
        source_location: Root the run lists documents under
        account_name: Storage account for DefaultAzureCredential auth
        connection_string: Full connection string (takes precedence)
    """

    source_location: Optional[str] = Field(
        default=None,
        description="Root location listed for STAC documents",
        examples=["abfs://stac-catalog/imagery", "./fixtures/catalog"]
    )

    account_name: Optional[str] = Field(
        default=None,
        description="Azure storage account name (used with DefaultAzureCredential)",
        examples=["mycatalogstore"]
    )

    connection_string: Optional[str] = Field(
        default=None,
        description="Azure storage connection string (overrides account_name)"
    )

    @property
    def is_blob_source(self) -> bool:
        """True when the source location uses the blob storage scheme."""
        return bool(self.source_location) and self.source_location.startswith(
            StorageDefaults.BLOB_SCHEME_PREFIX
        )

    @property
    def has_unsupported_scheme(self) -> bool:
        """True for scheme-prefixed locations other than abfs://."""
        return bool(self.source_location) and "://" in self.source_location and not self.is_blob_source

    @property
    def account_url(self) -> Optional[str]:
        """Blob endpoint derived from the account name."""
        if not self.account_name:
            return None
        return StorageDefaults.ACCOUNT_URL_TEMPLATE.format(account=self.account_name)

    def validate_settings(self) -> List[str]:
        """
        Validate storage settings.

        Returns:
            List of problems (empty if valid)
        """
        errors = []
        if not self.source_location:
            errors.append("STAC_SOURCE_LOCATION is required (e.g. abfs://container/prefix)")
        elif self.has_unsupported_scheme:
            errors.append(
                f"STAC_SOURCE_LOCATION uses an unsupported scheme: {self.source_location} "
                f"(supported: {StorageDefaults.BLOB_SCHEME_PREFIX} or a local directory)"
            )
        elif self.is_blob_source and not (self.connection_string or self.account_name):
            errors.append(
                "AZURE_STORAGE_CONNECTION_STRING or STORAGE_ACCOUNT_NAME is required "
                "for abfs:// sources"
            )
        return errors

    def debug_dict(self) -> Dict[str, Any]:
        """Settings safe to log."""
        return {
            'source_location': self.source_location,
            'account_name': self.account_name,
            'connection_string': '***MASKED***' if self.connection_string else None,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            source_location=os.environ.get("STAC_SOURCE_LOCATION") or None,
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME") or None,
            connection_string=os.environ.get("AZURE_STORAGE_CONNECTION_STRING") or None,
        )
