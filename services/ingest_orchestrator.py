# ============================================================================
# INGEST ORCHESTRATOR
# ============================================================================
# STATUS: Controller - sequences one ingest run
# PURPOSE: Validate config, collect the batch, bulk index it, report
# EXPORTS: IngestOrchestrator
# DEPENDENCIES: config, services, infrastructure
# ============================================================================

"""
Ingest Orchestrator.

One run:
    1. discovery + fetch + normalization (FetchPipeline)
    2. drop absent slots
    3. single bulk submission (BulkIndexWriter)
    4. summary log (IngestReport)

No state is persisted between runs. Re-running is safe: documents are
indexed under their source key, so a second run overwrites the first.
"""

import time
import uuid
from typing import Optional

from config import AppConfig
from core.models import IngestReport
from infrastructure.document_store import IDocumentStore, create_document_store
from infrastructure.search_index import ISearchIndex, ElasticsearchIndex
from services.bulk_index_writer import BulkIndexWriter
from services.fetch_pipeline import FetchPipeline
from services.stac_normalizer import StacNormalizer
from util_logger import LoggerFactory, ComponentType, LogContext, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.CONTROLLER, "IngestOrchestrator")


class IngestOrchestrator:
    """
    Runs the ingest pipeline end to end.

    Adapters passed in are used as-is and left open for the caller.
    Adapters built from configuration are closed when the run ends.
    """

    def __init__(self, config: AppConfig, store: Optional[IDocumentStore] = None,
                 index: Optional[ISearchIndex] = None):
        # Fails before any I/O when required settings are missing
        self.config = config.require_valid()
        self._store = store
        self._index = index

    @property
    def source_root(self) -> str:
        return self.config.storage.source_location

    @property
    def target_index(self) -> str:
        return self.config.index.index_name

    @log_exceptions(ComponentType.CONTROLLER, "IngestOrchestrator")
    async def run(self) -> IngestReport:
        """
        Execute one run.

        The index adapter is built before the first listing so a client that
        cannot be constructed fails the run before any read.

        Raises:
            ConfigurationError: Search index client could not be built
            ResourceNotFoundError: Source root could not be listed
        """
        report = IngestReport(run_id=uuid.uuid4().hex)
        LoggerFactory.bind_context(LogContext(
            run_id=report.run_id,
            source_root=self.source_root,
            target_index=self.target_index,
        ))
        started = time.monotonic()
        index = None

        try:
            index = self._index or ElasticsearchIndex.from_config(self.config.index)

            logger.info(f"Starting ingest: {self.source_root} -> {self.target_index}")
            batch = await self._collect()
            report.discovered = batch.discovered_count
            report.skipped = batch.skipped_keys
            report.dropped = batch.drop_counts()

            documents = batch.documents
            report.normalized = len(documents)

            write_report = await BulkIndexWriter(index, self.target_index).write(documents)
            report.indexed = write_report.accepted
            report.rejected = write_report.rejected_count

            report.duration_seconds = time.monotonic() - started
            logger.info(
                f"Ingest complete: {report.indexed}/{report.discovered} documents indexed",
                extra={'custom_dimensions': report.to_dict()}
            )
            return report
        finally:
            if index is not None and self._index is None:
                await index.close()
            LoggerFactory.bind_context(None)

    async def _collect(self):
        store = self._store or create_document_store(self.source_root, self.config.storage)
        try:
            normalizer = StacNormalizer(store, self.config.ingest.absolute_href_prefixes)
            pipeline = FetchPipeline(
                store,
                normalizer,
                max_concurrent=self.config.ingest.max_concurrent_fetches,
                document_extension=self.config.ingest.document_extension,
            )
            return await pipeline.collect(self.source_root)
        finally:
            if self._store is None:
                await store.close()
