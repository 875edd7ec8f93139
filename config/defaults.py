"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - StorageDefaults: Object store conventions (scheme, extension)
    - IndexDefaults: Search index client settings
    - IngestDefaults: Fetch pipeline and normalization settings
    - AppDefaults: Logging and environment

Required values (source location, index name, index credentials) have NO
defaults here; AppConfig.require_valid() fails the run when they are unset.

Usage:
    from config.defaults import IngestDefaults

    max_concurrent: int = Field(default=IngestDefaults.MAX_CONCURRENT_FETCHES, ...)
"""


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """Object store conventions."""

    # Keys are written as abfs://<container>/<blob path>
    BLOB_SCHEME_PREFIX = "abfs://"

    # Account URL template used with DefaultAzureCredential
    ACCOUNT_URL_TEMPLATE = "https://{account}.blob.core.windows.net"


# =============================================================================
# SEARCH INDEX DEFAULTS
# =============================================================================

class IndexDefaults:
    """Elasticsearch client settings (safe for any deployment)."""

    BULK_CHUNK_SIZE = 500
    REQUEST_TIMEOUT_SECONDS = 30


# =============================================================================
# INGEST DEFAULTS
# =============================================================================

class IngestDefaults:
    """Fetch pipeline and normalization settings."""

    # Admission ceiling for in-flight fetch-and-normalize units
    MAX_CONCURRENT_FETCHES = 25

    # Only keys whose final segment ends with this are read
    DOCUMENT_EXTENSION = ".json"

    # Non-zero exit when documents were dropped or rejected (opt-in)
    FAIL_ON_DROPPED = False

    # Asset hrefs already starting with one of these are left alone.
    # The store's own scheme prefix is added at runtime.
    ABSOLUTE_HREF_PREFIXES = ("https://",)


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-wide settings."""

    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
    LOG_FORMAT = "auto"

    # Process exit codes
    EXIT_OK = 0
    EXIT_FATAL = 1
    EXIT_DOCUMENTS_DROPPED = 2
