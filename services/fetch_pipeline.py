# ============================================================================
# FETCH PIPELINE
# ============================================================================
# STATUS: Service - bounded-concurrency discovery, fetch and normalization
# PURPOSE: Produce one batch slot per eligible key without overwhelming the store
# EXPORTS: FetchPipeline
# DEPENDENCIES: asyncio, infrastructure.document_store, services.stac_normalizer
# ============================================================================

"""
Fetch Pipeline.

Listing streams keys straight into an admission ceiling: each eligible key
becomes one fetch-and-normalize unit, and at most ``max_concurrent`` units
hold a slot at any moment. Units return tagged results instead of raising,
and the pipeline waits for every unit before handing back the batch.
"""

import asyncio
from typing import List

from config.defaults import IngestDefaults
from core.models import Batch, DropReason, FetchOutcome
from exceptions import BusinessLogicError, ContractViolationError
from infrastructure.document_store import IDocumentStore
from services.stac_normalizer import StacNormalizer
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FetchPipeline")


class FetchPipeline:
    """
    Pool of fetch-and-normalize units behind a counting semaphore.
    """

    def __init__(self, store: IDocumentStore, normalizer: StacNormalizer,
                 max_concurrent: int = IngestDefaults.MAX_CONCURRENT_FETCHES,
                 document_extension: str = IngestDefaults.DOCUMENT_EXTENSION):
        """
        Initialize the pipeline.

        Args:
            store: Source of keys and bytes
            normalizer: Shared, stateless normalizer
            max_concurrent: Admission ceiling for in-flight units
            document_extension: Only keys whose final segment ends with this are read
        """
        if not isinstance(max_concurrent, int) or max_concurrent < 1:
            raise ContractViolationError(f"max_concurrent must be a positive int, got {max_concurrent!r}")

        self.store = store
        self.normalizer = normalizer
        self.max_concurrent = max_concurrent
        self.document_extension = document_extension
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._active_count = 0
        self._peak_active_count = 0

    @property
    def active_count(self) -> int:
        """Number of units currently holding a slot."""
        return self._active_count

    @property
    def peak_active_count(self) -> int:
        """Highest number of units that held a slot at the same time."""
        return self._peak_active_count

    @property
    def available_slots(self) -> int:
        """Number of free slots."""
        return self.max_concurrent - self._active_count

    def is_eligible(self, key: str) -> bool:
        return key.rsplit("/", 1)[-1].endswith(self.document_extension)

    async def collect(self, root: str) -> Batch:
        """
        Discover, fetch and normalize every eligible key under ``root``.

        Listing errors propagate once the units already started have
        settled. Per-key failures become absent slots.
        """
        batch = Batch()
        tasks: List[asyncio.Task] = []

        try:
            async for key in self.store.list(root):
                if not self.is_eligible(key):
                    logger.debug(f"Skipping non-document key: {key}")
                    batch.skipped_keys += 1
                    continue
                tasks.append(asyncio.create_task(self._fetch_one(key)))
        except Exception:
            await asyncio.gather(*tasks)
            raise

        batch.outcomes = list(await asyncio.gather(*tasks))

        logger.info(
            f"Collected {batch.discovered_count} documents "
            f"({len(batch.documents)} present, {len(batch.dropped)} dropped)",
            extra={'custom_dimensions': {
                'discovered': batch.discovered_count,
                'skipped': batch.skipped_keys,
                'dropped_by_reason': batch.drop_counts(),
                'peak_active_count': self._peak_active_count,
            }}
        )
        return batch

    async def _fetch_one(self, key: str) -> FetchOutcome:
        async with self._semaphore:
            self._active_count += 1
            self._peak_active_count = max(self._peak_active_count, self._active_count)
            try:
                return await self._read_and_normalize(key)
            finally:
                self._active_count -= 1

    async def _read_and_normalize(self, key: str) -> FetchOutcome:
        try:
            raw = await self.store.read(key)
        except BusinessLogicError as e:
            logger.warning(f"Read failed: {e}", extra={'custom_dimensions': {
                'source_key': key, 'drop_reason': DropReason.READ_FAILED.value,
            }})
            return FetchOutcome.dropped(key, DropReason.READ_FAILED, str(e))
        except Exception as e:
            logger.error(f"Unexpected read failure for {key}: {e}", exc_info=True, extra={
                'custom_dimensions': {'source_key': key, 'drop_reason': DropReason.READ_FAILED.value}
            })
            return FetchOutcome.dropped(key, DropReason.READ_FAILED, str(e))

        return self.normalizer.normalize(raw, key)
