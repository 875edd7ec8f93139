"""
Search Index Configuration.

Elastic Cloud connection settings for the bulk writer.

Exports:
    IndexConfig: Pydantic search index configuration model
    cloud_id_is_valid: Elastic Cloud id format check
"""

import os
from typing import Optional, List, Dict, Any
from elastic_transport.client_utils import parse_cloud_id
from pydantic import BaseModel, Field

from config.defaults import IndexDefaults


def cloud_id_is_valid(cloud_id: str) -> bool:
    """True when the id decodes to a deployment with an Elasticsearch endpoint."""
    try:
        return parse_cloud_id(cloud_id).es_address is not None
    except ValueError:
        return False


class IndexConfig(BaseModel):
    """
    Target search index configuration.

    index_name, cloud_id, username and password are all required; they are
    checked by validate_settings() before the run touches the network.
    """

    index_name: Optional[str] = Field(
        default=None,
        description="Target index receiving the normalized documents",
        examples=["stac-items"]
    )

    cloud_id: Optional[str] = Field(
        default=None,
        description="Elastic Cloud deployment id"
    )

    username: Optional[str] = Field(
        default=None,
        description="Index service username"
    )

    password: Optional[str] = Field(
        default=None,
        description="Index service password"
    )

    bulk_chunk_size: int = Field(
        default=IndexDefaults.BULK_CHUNK_SIZE,
        ge=1,
        le=10000,
        description="Documents per bulk request chunk"
    )

    request_timeout_seconds: int = Field(
        default=IndexDefaults.REQUEST_TIMEOUT_SECONDS,
        ge=1,
        le=600,
        description="Client request timeout"
    )

    def validate_settings(self) -> List[str]:
        """
        Validate index settings.

        Returns:
            List of problems (empty if valid)
        """
        errors = []
        if not self.index_name:
            errors.append("ELASTIC_INDEX is required")
        if not self.cloud_id:
            errors.append("ELASTIC_ID is required")
        elif not cloud_id_is_valid(self.cloud_id):
            errors.append("ELASTIC_ID is not a valid Elastic Cloud id")
        if not self.username:
            errors.append("ELASTIC_USERNAME is required")
        if not self.password:
            errors.append("ELASTIC_PASSWORD is required")
        return errors

    def debug_dict(self) -> Dict[str, Any]:
        """Settings safe to log."""
        return {
            'index_name': self.index_name,
            'cloud_id': self.cloud_id,
            'username': self.username,
            'password': '***MASKED***' if self.password else None,
            'bulk_chunk_size': self.bulk_chunk_size,
            'request_timeout_seconds': self.request_timeout_seconds,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            index_name=os.environ.get("ELASTIC_INDEX") or None,
            cloud_id=os.environ.get("ELASTIC_ID") or None,
            username=os.environ.get("ELASTIC_USERNAME") or None,
            password=os.environ.get("ELASTIC_PASSWORD") or None,
            bulk_chunk_size=int(os.environ.get("ELASTIC_BULK_CHUNK_SIZE", str(IndexDefaults.BULK_CHUNK_SIZE))),
            request_timeout_seconds=int(
                os.environ.get("ELASTIC_REQUEST_TIMEOUT", str(IndexDefaults.REQUEST_TIMEOUT_SECONDS))
            ),
        )
