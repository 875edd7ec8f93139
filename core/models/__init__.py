"""
Core Data Models Package.

Contains pure data structures without I/O.

Exports:
    StacDocument: STAC document view
    DropReason, NormalizationResult, FetchOutcome, Batch: Pipeline results
    IndexOperation, IndexRejection, BulkSubmission, BulkWriteReport: Index results
    IngestReport: Run summary
"""

from .stac import (
    StacDocument,
    SELF_REL,
    GENERATED_SUMMARY_KEY,
)

from .results import (
    DropReason,
    NormalizationResult,
    FetchOutcome,
    Batch,
    IndexOperation,
    IndexRejection,
    BulkSubmission,
    BulkWriteReport,
    IngestReport,
)

__all__ = [
    'StacDocument',
    'SELF_REL',
    'GENERATED_SUMMARY_KEY',
    'DropReason',
    'NormalizationResult',
    'FetchOutcome',
    'Batch',
    'IndexOperation',
    'IndexRejection',
    'BulkSubmission',
    'BulkWriteReport',
    'IngestReport',
]
