"""
Ingest Services - Explicit Exports

Every service the run uses is imported here explicitly. No registries, no
auto-discovery: if it is not listed in __all__, the orchestrator does not
use it.

Pipeline order:
    FetchPipeline -> StacNormalizer -> BulkIndexWriter, sequenced by
    IngestOrchestrator
"""

from .stac_normalizer import StacNormalizer, containing_directory
from .fetch_pipeline import FetchPipeline
from .bulk_index_writer import BulkIndexWriter
from .ingest_orchestrator import IngestOrchestrator

__all__ = [
    'StacNormalizer',
    'containing_directory',
    'FetchPipeline',
    'BulkIndexWriter',
    'IngestOrchestrator',
]
