# ============================================================================
# STAC DOCUMENT MODELS
# ============================================================================
# STATUS: Data models - STAC documents as read from the object store
# PURPOSE: View over the fields normalization touches; pass-through for
#          everything else
# EXPORTS: StacDocument, SELF_REL, GENERATED_SUMMARY_KEY
# DEPENDENCIES: pydantic
# ============================================================================
"""
STAC Document Models.

Only the version marker is required. The blocks the ingest run reads or
rewrites (links, assets, properties, summaries) are declared loosely: a
block with an unexpected shape is carried to the index as read, and the
normalizer skips the parts it cannot work on. Every other field (bbox,
stac_extensions, collection, ...) is kept as an extra.

Index-only fields use the ``@`` prefix so they never collide with STAC
fields:
    @source     storage key the document was read from (index _id)
    @timestamp  derived generation timestamp
    @ingested   wall-clock time the run normalized the document
"""

from typing import Dict, Any, Optional, List, Tuple
from pydantic import BaseModel, Field, ConfigDict, field_validator


# =============================================================================
# CONSTANTS
# =============================================================================

SELF_REL = "self"

# Summary block written by the LINZ catalog generator
GENERATED_SUMMARY_KEY = "linz:generated"


# =============================================================================
# MODELS
# =============================================================================

class StacDocument(BaseModel):
    """
    STAC item, collection or catalog read from one storage key.

    Constructed once per successful parse, mutated in place by the
    normalizer, then handed to the bulk writer unchanged.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    stac_version: Any
    links: Any = None
    assets: Any = None
    properties: Any = None
    summaries: Any = None

    source_key: Optional[str] = Field(default=None, alias="@source")
    generated_timestamp: Optional[str] = Field(default=None, alias="@timestamp")
    ingest_timestamp: Optional[str] = Field(default=None, alias="@ingested")

    @field_validator("stac_version")
    @classmethod
    def version_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("stac_version must not be null")
        return value

    def self_links(self) -> List[Dict[str, Any]]:
        """Link objects whose relation points back at the document itself."""
        if not isinstance(self.links, list):
            return []
        return [link for link in self.links if isinstance(link, dict) and link.get("rel") == SELF_REL]

    def asset_entries(self) -> List[Tuple[str, Dict[str, Any]]]:
        """(name, asset) pairs for every asset given as an object."""
        if not isinstance(self.assets, dict):
            return []
        return [(name, asset) for name, asset in self.assets.items() if isinstance(asset, dict)]

    def generated_summary(self) -> Optional[Dict[str, Any]]:
        """First entry of the generation summary block, if the block is present."""
        if not isinstance(self.summaries, dict):
            return None
        entries = self.summaries.get(GENERATED_SUMMARY_KEY)
        if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
            return None
        return entries[0]

    def to_index_body(self) -> Dict[str, Any]:
        """
        Serialize for the search index.

        Fields absent from the source document stay absent; unknown fields
        are emitted as read.
        """
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
