# ============================================================================
# STAC NORMALIZER SERVICE
# ============================================================================
# STATUS: Service - per-document normalization
# PURPOSE: Turn raw bytes read from one key into an indexable StacDocument
# EXPORTS: StacNormalizer, containing_directory
# DEPENDENCIES: pydantic, core.models, infrastructure.document_store
# ============================================================================
"""
STAC Normalizer Service.

Normalization is layered, the same way for every key:
    1. Parse (bytes -> JSON object)
    2. Version marker check (stac_version present)
    3. Timestamp derivation (@timestamp)
    4. Self-link repair
    5. Asset href resolution against the containing directory
    6. Stamp @source and @ingested

Steps 1-2 drop the document. Steps 3-5 only warn or repair; blocks with an
unexpected shape are passed through untouched.

Exports:
    StacNormalizer: Normalization service
    containing_directory: Key with its final segment removed
"""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from config.defaults import IngestDefaults
from core.models import GENERATED_SUMMARY_KEY, DropReason, NormalizationResult, StacDocument
from exceptions import DocumentRejectedError
from infrastructure.document_store import IDocumentStore
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "StacNormalizer")


def containing_directory(key: str) -> str:
    """``a/b/item.json`` -> ``a/b``; keys without ``/`` -> ``""``."""
    index = key.rfind("/")
    return key[:index] if index >= 0 else ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StacNormalizer:
    """
    Normalizes one document at a time. Holds no per-document state, so one
    instance is shared by every fetch unit of a run.

    Args:
        store: Store the keys come from (used to join relative asset hrefs)
        absolute_href_prefixes: Asset hrefs starting with one of these are
            left untouched; the store's scheme prefix is always included
        clock: Source of the @ingested timestamp
    """

    def __init__(self, store: IDocumentStore,
                 absolute_href_prefixes: Sequence[str] = IngestDefaults.ABSOLUTE_HREF_PREFIXES,
                 clock: Callable[[], datetime] = _utc_now):
        self.store = store
        prefixes = list(absolute_href_prefixes)
        if store.scheme_prefix and store.scheme_prefix not in prefixes:
            prefixes.append(store.scheme_prefix)
        self.absolute_href_prefixes = tuple(prefixes)
        self.clock = clock

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def normalize(self, raw: bytes, key: str) -> NormalizationResult:
        """
        Normalize the bytes read from ``key``.

        Never raises: a document that cannot be indexed comes back with
        ``document=None`` and a drop reason.
        """
        result = NormalizationResult(key=key)
        try:
            document = self._parse(raw, key)
            self._derive_timestamp(document, result)
            self._repair_self_link(document, result)
            self._resolve_asset_hrefs(document, result)

            document.source_key = key
            document.ingest_timestamp = self.clock().isoformat()
            result.document = document

        except DocumentRejectedError as e:
            logger.warning(str(e), extra={'custom_dimensions': {
                'source_key': key, 'drop_reason': e.reason.value,
            }})
            result.drop_reason = e.reason
            if e.detail:
                result.add_warning(e.detail)
        except Exception as e:
            logger.error(f"Unexpected normalization failure for {key}: {e}", exc_info=True,
                         extra={'custom_dimensions': {'source_key': key}})
            result.drop_reason = DropReason.INVALID_STRUCTURE
            result.add_warning(str(e))

        return result

    # =========================================================================
    # DROP CHECKS
    # =========================================================================

    def _parse(self, raw: bytes, key: str) -> StacDocument:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise DocumentRejectedError(key, DropReason.PARSE_FAILED, f"Invalid JSON: {e}")

        if not isinstance(data, dict):
            raise DocumentRejectedError(
                key, DropReason.PARSE_FAILED, f"Expected a JSON object, got {type(data).__name__}"
            )

        if data.get("stac_version") is None:
            raise DocumentRejectedError(key, DropReason.MISSING_VERSION, "No stac_version")

        return StacDocument.model_validate(data)

    # =========================================================================
    # DERIVATION AND REPAIRS
    # =========================================================================

    def _derive_timestamp(self, document: StacDocument, result: NormalizationResult):
        """
        Precedence: generation summary (date, then datetime), then
        properties.datetime. The first block present decides; there is no
        fall-through when it holds no value.
        """
        value: Any = None
        source: Optional[str] = None

        summary = document.generated_summary()
        if summary is not None:
            source = f"summaries.{GENERATED_SUMMARY_KEY}"
            value = summary.get("date")
            if value is None:
                value = summary.get("datetime")
        elif isinstance(document.properties, dict):
            source = "properties"
            value = document.properties.get("datetime")

        if value is None:
            warning = f"No timestamp found ({source or 'no summary or properties block'})"
            logger.warning(f"{warning}: {result.key}", extra={'custom_dimensions': {'source_key': result.key}})
            result.add_warning(warning)
            return

        document.generated_timestamp = str(value)

    def _repair_self_link(self, document: StacDocument, result: NormalizationResult):
        key = result.key
        self_links = document.self_links()

        if len(self_links) != 1:
            warning = f"Expected one self link, found {len(self_links)}"
            logger.warning(f"{warning}: {key}", extra={'custom_dimensions': {
                'source_key': key, 'self_link_count': len(self_links),
            }})
            result.add_warning(warning)
            return

        link = self_links[0]
        if link.get("href") != key:
            logger.info("Rewriting self link", extra={'custom_dimensions': {
                'source_key': key, 'old_href': link.get("href"), 'new_href': key,
            }})
            link["href"] = key
            result.add_repair("self_link")

    def _resolve_asset_hrefs(self, document: StacDocument, result: NormalizationResult):
        directory = containing_directory(result.key)
        for name, asset in document.asset_entries():
            href = asset.get("href")
            if not isinstance(href, str):
                warning = f"Asset '{name}' has no string href"
                logger.warning(f"{warning}: {result.key}", extra={'custom_dimensions': {'source_key': result.key}})
                result.add_warning(warning)
                continue
            if href.startswith(self.absolute_href_prefixes):
                continue

            new_href = self.store.join(directory, href)
            if new_href == href:
                continue
            logger.info(f"Resolving asset href '{name}'", extra={'custom_dimensions': {
                'source_key': result.key, 'old_href': href, 'new_href': new_href,
            }})
            asset["href"] = new_href
            result.add_repair(f"assets.{name}.href")
