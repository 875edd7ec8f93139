#!/usr/bin/env python3
# ============================================================================
# INGEST ENTRY POINT
# ============================================================================
# STATUS: Entry point - command line / container
# PURPOSE: Load configuration, run one ingest, map the outcome to an exit code
# ============================================================================
"""
STAC Ingest Entry Point.

Usage:
    stac-ingest
    stac-ingest --env-file deploy/prod.env
    python ingest_main.py

Environment Variables (Required):
    STAC_SOURCE_LOCATION=abfs://<container>/<prefix> or a local directory
    ELASTIC_INDEX, ELASTIC_ID, ELASTIC_USERNAME, ELASTIC_PASSWORD
    AZURE_STORAGE_CONNECTION_STRING or STORAGE_ACCOUNT_NAME (abfs:// only)

Exit codes:
    0  run completed (dropped/rejected documents are logged)
    1  configuration error or fatal failure
    2  run completed with losses and INGEST_FAIL_ON_DROPPED=true
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from config import AppConfig
from config.defaults import AppDefaults
from config.env_validation import log_validation_results
from exceptions import ConfigurationError
from services.ingest_orchestrator import IngestOrchestrator
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.CONTROLLER, "ingest_main")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stac-ingest",
        description="Load STAC documents from an object store into a search index",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Read environment variables from this file (default: .env when present)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the stac-ingest console script."""
    args = _parse_args(argv)
    # Real environment variables win over the file
    load_dotenv(args.env_file or find_dotenv(usecwd=True), override=False)

    if not log_validation_results(logger):
        return AppDefaults.EXIT_FATAL

    try:
        config = AppConfig.from_environment().require_valid()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return AppDefaults.EXIT_FATAL

    LoggerFactory.set_level(config.log_level)
    LoggerFactory.set_format(config.log_format)
    logger.debug("Configuration loaded", extra={'custom_dimensions': config.debug_dict()})

    try:
        report = asyncio.run(IngestOrchestrator(config).run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return AppDefaults.EXIT_FATAL
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return AppDefaults.EXIT_FATAL

    if report.has_losses and config.ingest.fail_on_dropped:
        logger.warning(
            f"{report.dropped_count} dropped and {report.rejected} rejected documents "
            f"(INGEST_FAIL_ON_DROPPED=true)"
        )
        return AppDefaults.EXIT_DOCUMENTS_DROPPED
    return AppDefaults.EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
