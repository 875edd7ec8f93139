# ============================================================================
# BULK INDEX WRITER
# ============================================================================
# STATUS: Service - best-effort bulk load of normalized documents
# PURPOSE: One index operation per document, one submission per batch
# EXPORTS: BulkIndexWriter
# DEPENDENCIES: core.models, infrastructure.search_index
# ============================================================================

"""
Bulk Index Writer.

Report rather than abort: a rejected document is logged with its id and
the index's reason, and the submission still counts as done. Nothing is
retried.
"""

import json
from typing import Dict, List, Sequence

from core.models import BulkWriteReport, IndexOperation, StacDocument
from exceptions import ContractViolationError
from infrastructure.search_index import ISearchIndex
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "BulkIndexWriter")


class BulkIndexWriter:
    """Writes a batch of documents to one target index."""

    def __init__(self, index: ISearchIndex, target_index: str):
        if not target_index:
            raise ContractViolationError("target_index is required")
        self.index = index
        self.target_index = target_index

    def build_operations(self, documents: Sequence[StacDocument]) -> List[IndexOperation]:
        operations = []
        for document in documents:
            if not isinstance(document, StacDocument):
                raise ContractViolationError(
                    f"Expected StacDocument, got {type(document).__name__}"
                )
            if not document.source_key:
                raise ContractViolationError("Document has no source key (not normalized)")
            operations.append(IndexOperation(
                target_index=self.target_index,
                document_id=document.source_key,
                body=document.to_index_body(),
            ))
        return operations

    async def write(self, documents: Sequence[StacDocument]) -> BulkWriteReport:
        """
        Submit every document as a single bulk submission.

        Returns:
            BulkWriteReport with accepted count and rejections
        """
        report = BulkWriteReport()
        if not documents:
            logger.info("No documents to index")
            return report

        operations = self.build_operations(documents)
        report.submitted = len(operations)
        logger.info(f"Submitting {report.submitted} documents to {self.target_index}")

        submission = await self.index.bulk(operations)
        report.accepted = len(submission.accepted)
        report.rejected = list(submission.rejected)

        bodies: Dict[str, dict] = {op.document_id: op.body for op in operations}
        for rejection in report.rejected:
            logger.error(
                f"Index rejected {rejection.document_id}: {rejection.reason}",
                extra={'custom_dimensions': {
                    'source_key': rejection.document_id,
                    'status': rejection.status,
                    'reason': rejection.reason,
                }}
            )
            logger.debug(f"Rejected document body: {json.dumps(bodies.get(rejection.document_id), default=str)}",
                         extra={'custom_dimensions': {'source_key': rejection.document_id}})

        logger.info(
            f"Indexed {report.accepted}/{report.submitted} documents "
            f"({report.rejected_count} rejected)"
        )
        return report
