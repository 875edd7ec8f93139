# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by every layer
# PURPOSE: Separate contract violations from expected ingest failures
# EXPORTS: ContractViolationError, BusinessLogicError, ResourceNotFoundError,
#          DocumentNotFoundError, StorageReadError, DocumentRejectedError,
#          ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues, handled per document)
3. Configuration Errors (fatal, raised before any I/O)
"""

from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.

    Examples:
        - Fetch pipeline constructed with a non-positive ceiling
        - Writer handed something that is not a StacDocument
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These are normal failures that occur during a run and are handled
    per document without aborting the run.
    """
    pass


class ResourceNotFoundError(BusinessLogicError):
    """
    Requested resource does not exist.

    Examples:
        - Container missing in the storage account
        - Source directory missing on local disk
    """
    pass


class DocumentNotFoundError(ResourceNotFoundError):
    """A listed key vanished before it could be read."""

    def __init__(self, key: str):
        super().__init__(f"Document not found: {key}")
        self.key = key


class StorageReadError(BusinessLogicError):
    """
    Object store read failed for a reason other than a missing key.

    Examples:
        - Permission denied on the blob
        - Connection reset mid-download
    """

    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to read {key}: {reason}")
        self.key = key
        self.reason = reason


class DocumentRejectedError(BusinessLogicError):
    """
    Document cannot be indexed.

    Raised inside the normalizer and converted to an absent batch slot;
    never escapes normalization.
    """

    def __init__(self, key: str, reason, detail: Optional[str] = None):
        message = f"Document rejected ({getattr(reason, 'value', reason)}): {key}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)
        self.key = key
        self.reason = reason
        self.detail = detail


class ConfigurationError(Exception):
    """
    System configuration error.

    Fatal: raised before any network access when required settings are
    missing or malformed.

    Examples:
        - Missing STAC_SOURCE_LOCATION
        - Missing ELASTIC_* credentials
        - Unsupported source scheme
    """
    pass
