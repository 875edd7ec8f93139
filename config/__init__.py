# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration - exports
# PURPOSE: Single entry point for application configuration
# EXPORTS: AppConfig, StorageConfig, IndexConfig, IngestConfig
# DEPENDENCIES: domain config modules
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports
    ├── app_config.py            # Main config (composes domain configs)
    ├── storage_config.py        # Source object store
    ├── index_config.py          # Target search index
    ├── ingest_config.py         # Fetch pipeline and normalization
    ├── defaults.py              # Default values
    └── env_validation.py        # Format checks of raw env vars

Usage:
    from config import AppConfig
    config = AppConfig.from_environment().require_valid()
    ceiling = config.ingest.max_concurrent_fetches

The entry point builds one AppConfig and passes it explicitly; there is no
module-level instance.
"""

from .storage_config import StorageConfig
from .index_config import IndexConfig
from .ingest_config import IngestConfig
from .app_config import AppConfig


__all__ = [
    'AppConfig',
    'StorageConfig',
    'IndexConfig',
    'IngestConfig',
]
