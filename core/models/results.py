"""
Ingest Result Models.

Tagged results passed between the ingest stages. Nothing here raises:
failures are data.

Exports:
    DropReason: Why a key produced no document
    NormalizationResult: Normalizer output for one key
    FetchOutcome: One batch slot (present or absent)
    Batch: Every slot of one discovery pass
    IndexOperation: One bulk index operation
    IndexRejection: Per-document rejection reported by the index
    BulkSubmission: Adapter-level result of one bulk submission
    BulkWriteReport: Writer-level result
    IngestReport: Run summary
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from .stac import StacDocument


class DropReason(str, Enum):
    """Why a discovered key has no document in the batch."""
    READ_FAILED = "read_failed"
    PARSE_FAILED = "parse_failed"
    MISSING_VERSION = "missing_version"
    INVALID_STRUCTURE = "invalid_structure"


@dataclass
class NormalizationResult:
    """
    Result of normalizing one document.

    Attributes:
        key: Storage key the bytes were read from
        document: Normalized document, None when dropped
        drop_reason: Set when document is None
        warnings: Non-fatal anomalies (missing timestamp, self-link count)
        repairs: Rewrites applied (self link, asset hrefs)
    """
    key: str
    document: Optional[StacDocument] = None
    drop_reason: Optional[DropReason] = None
    warnings: List[str] = field(default_factory=list)
    repairs: List[str] = field(default_factory=list)

    @property
    def is_present(self) -> bool:
        return self.document is not None

    def add_warning(self, warning: str):
        """Add a warning (doesn't affect the document's inclusion)."""
        self.warnings.append(warning)

    def add_repair(self, repair: str):
        self.repairs.append(repair)

    @classmethod
    def dropped(cls, key: str, reason: DropReason, detail: Optional[str] = None) -> "NormalizationResult":
        result = cls(key=key, drop_reason=reason)
        if detail:
            result.add_warning(detail)
        return result


# One slot per key: the pipeline and the normalizer share the shape
FetchOutcome = NormalizationResult


@dataclass
class Batch:
    """
    Complete set of slots from one discovery pass.

    Exactly one slot per eligible key, in completion order.
    """
    outcomes: List[FetchOutcome] = field(default_factory=list)
    skipped_keys: int = 0

    @property
    def documents(self) -> List[StacDocument]:
        """Present documents only; absent slots are dropped."""
        return [outcome.document for outcome in self.outcomes if outcome.document is not None]

    @property
    def dropped(self) -> List[FetchOutcome]:
        return [outcome for outcome in self.outcomes if outcome.document is None]

    @property
    def discovered_count(self) -> int:
        return len(self.outcomes)

    def drop_counts(self) -> Dict[str, int]:
        """Dropped slots grouped by reason."""
        counts: Dict[str, int] = {}
        for outcome in self.dropped:
            reason = outcome.drop_reason.value if outcome.drop_reason else "unknown"
            counts[reason] = counts.get(reason, 0) + 1
        return counts


@dataclass(frozen=True)
class IndexOperation:
    """One index operation: identity plus payload."""
    target_index: str
    document_id: str
    body: Dict[str, Any]


@dataclass(frozen=True)
class IndexRejection:
    """A document the index refused."""
    document_id: Optional[str]
    reason: str
    status: Optional[int] = None


@dataclass
class BulkSubmission:
    """Per-document acceptance as reported by the index adapter."""
    accepted: List[str] = field(default_factory=list)
    rejected: List[IndexRejection] = field(default_factory=list)


@dataclass
class BulkWriteReport:
    """What the writer submitted and what came back."""
    submitted: int = 0
    accepted: int = 0
    rejected: List[IndexRejection] = field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


@dataclass
class IngestReport:
    """
    Summary of one run.

    Attributes:
        run_id: Correlation id used in every log record of the run
        discovered: Eligible keys found by listing
        skipped: Keys ignored by the extension filter
        normalized: Documents that survived normalization
        dropped: Dropped slots by reason
        indexed: Documents the index accepted
        rejected: Documents the index refused
        duration_seconds: Wall-clock duration
    """
    run_id: str
    discovered: int = 0
    skipped: int = 0
    normalized: int = 0
    dropped: Dict[str, int] = field(default_factory=dict)
    indexed: int = 0
    rejected: int = 0
    duration_seconds: float = 0.0

    @property
    def dropped_count(self) -> int:
        return sum(self.dropped.values())

    @property
    def has_losses(self) -> bool:
        """True when any discovered document did not end up in the index."""
        return self.dropped_count > 0 or self.rejected > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            'run_id': self.run_id,
            'discovered': self.discovered,
            'skipped': self.skipped,
            'normalized': self.normalized,
            'dropped': self.dropped,
            'dropped_count': self.dropped_count,
            'indexed': self.indexed,
            'rejected': self.rejected,
            'duration_seconds': round(self.duration_seconds, 3),
        }
