"""
Ingest Pipeline Configuration.

Provides configuration for:
    - Admission ceiling for concurrent fetch-and-normalize units
    - Document file extension filter
    - Asset href prefixes treated as already absolute
    - Exit code policy for dropped/rejected documents

Exports:
    IngestConfig: Pydantic ingest pipeline configuration model
"""

import os
from typing import List
from pydantic import BaseModel, Field

from config.defaults import IngestDefaults


class IngestConfig(BaseModel):
    """
    Fetch pipeline and normalization configuration.
    """

    max_concurrent_fetches: int = Field(
        default=IngestDefaults.MAX_CONCURRENT_FETCHES,
        ge=1,
        le=1000,
        description="Maximum fetch-and-normalize units in flight at once"
    )

    document_extension: str = Field(
        default=IngestDefaults.DOCUMENT_EXTENSION,
        min_length=1,
        description="Only keys ending with this extension are processed",
        examples=[".json"]
    )

    absolute_href_prefixes: List[str] = Field(
        default_factory=lambda: list(IngestDefaults.ABSOLUTE_HREF_PREFIXES),
        description="Asset href prefixes left untouched (store scheme is added at runtime)"
    )

    fail_on_dropped: bool = Field(
        default=IngestDefaults.FAIL_ON_DROPPED,
        description="Exit non-zero when any document was dropped or rejected"
    )

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            max_concurrent_fetches=int(
                os.environ.get("INGEST_MAX_CONCURRENCY", str(IngestDefaults.MAX_CONCURRENT_FETCHES))
            ),
            document_extension=os.environ.get("INGEST_DOCUMENT_EXTENSION", IngestDefaults.DOCUMENT_EXTENSION),
            fail_on_dropped=os.environ.get(
                "INGEST_FAIL_ON_DROPPED", str(IngestDefaults.FAIL_ON_DROPPED)
            ).lower() in ("true", "1", "yes"),
        )
