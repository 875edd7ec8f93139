# ============================================================================
# SEARCH INDEX
# ============================================================================
# STATUS: Infrastructure - bulk write access to the search index
# PURPOSE: Submit index operations in bulk and report per-document results
# EXPORTS: ISearchIndex, ElasticsearchIndex
# DEPENDENCIES: elasticsearch[async]
# ============================================================================

"""
Search Index Adapter.

The adapter never raises for individual documents: every operation comes
back either accepted or as an IndexRejection. Transport failures that hit a
whole chunk are reported as rejections of the documents not yet confirmed.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from elasticsearch import AsyncElasticsearch, TransportError
from elasticsearch.helpers import async_streaming_bulk

from config.defaults import IndexDefaults
from config.index_config import IndexConfig
from core.models import BulkSubmission, IndexOperation, IndexRejection
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "SearchIndex")


class ISearchIndex(ABC):
    """Interface for bulk index submission (mockable in tests)."""

    @abstractmethod
    async def bulk(self, operations: Sequence[IndexOperation]) -> BulkSubmission:
        """Submit operations; report acceptance or rejection per document."""
        pass

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "ISearchIndex":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def _rejection_reason(error: Any) -> str:
    # Item errors are {"type": ..., "reason": ...}; chunk errors are strings
    if isinstance(error, dict):
        error_type = error.get("type")
        reason = error.get("reason")
        if error_type and reason:
            return f"{error_type}: {reason}"
        return str(reason or error_type or error)
    return str(error)


class ElasticsearchIndex(ISearchIndex):
    """
    Elastic Cloud index using the async bulk helper.

    Args:
        cloud_id: Elastic Cloud deployment id
        username: Basic auth user
        password: Basic auth password
        chunk_size: Documents per bulk request
        request_timeout: Client timeout in seconds
        client: Pre-built client (tests); skips construction from credentials
    """

    def __init__(self, cloud_id: Optional[str] = None, username: Optional[str] = None,
                 password: Optional[str] = None,
                 chunk_size: int = IndexDefaults.BULK_CHUNK_SIZE,
                 request_timeout: int = IndexDefaults.REQUEST_TIMEOUT_SECONDS,
                 client: Optional[AsyncElasticsearch] = None):
        self.chunk_size = chunk_size
        if client is not None:
            self._client = client
            return
        try:
            self._client = AsyncElasticsearch(
                cloud_id=cloud_id,
                basic_auth=(username, password),
                request_timeout=request_timeout,
            )
        except ValueError as e:
            raise ConfigurationError(f"Could not create search index client: {e}")

    @classmethod
    def from_config(cls, index_config: IndexConfig) -> "ElasticsearchIndex":
        return cls(
            cloud_id=index_config.cloud_id,
            username=index_config.username,
            password=index_config.password,
            chunk_size=index_config.bulk_chunk_size,
            request_timeout=index_config.request_timeout_seconds,
        )

    @staticmethod
    def _to_action(operation: IndexOperation) -> Dict[str, Any]:
        return {
            "_op_type": "index",
            "_index": operation.target_index,
            "_id": operation.document_id,
            "_source": operation.body,
        }

    async def bulk(self, operations: Sequence[IndexOperation]) -> BulkSubmission:
        submission = BulkSubmission()
        if not operations:
            return submission

        reported = set()
        actions = [self._to_action(operation) for operation in operations]

        try:
            async for ok, item in async_streaming_bulk(
                self._client,
                actions,
                chunk_size=self.chunk_size,
                raise_on_error=False,
                raise_on_exception=False,
            ):
                _op_type, detail = dict(item).popitem()
                document_id = detail.get("_id")
                reported.add(document_id)
                if ok:
                    submission.accepted.append(document_id)
                else:
                    submission.rejected.append(IndexRejection(
                        document_id=document_id,
                        reason=_rejection_reason(detail.get("error")),
                        status=detail.get("status"),
                    ))
        except TransportError as e:
            # Connection lost mid-submission: everything unconfirmed is rejected
            logger.error(f"Bulk submission interrupted: {e}")
            for operation in operations:
                if operation.document_id not in reported:
                    submission.rejected.append(IndexRejection(
                        document_id=operation.document_id,
                        reason=f"transport error: {e}",
                    ))

        logger.debug(
            f"Bulk submission finished: {len(submission.accepted)} accepted, "
            f"{len(submission.rejected)} rejected"
        )
        return submission

    async def close(self) -> None:
        await self._client.close()
