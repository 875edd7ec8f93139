"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StorageConfig (source object store)
    - IndexConfig (target search index)
    - IngestConfig (fetch pipeline and normalization)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
    One instance is built at startup and passed explicitly to the adapters
    and the orchestrator.
"""

import os
from typing import List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, ValidationError as PydanticValidationError

from exceptions import ConfigurationError
from .storage_config import StorageConfig
from .index_config import IndexConfig
from .ingest_config import IngestConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Frozen after construction; the run never mutates settings.
    """

    model_config = ConfigDict(frozen=True)

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level for run diagnostics",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    log_format: str = Field(
        default=AppDefaults.LOG_FORMAT,
        pattern=r"^(auto|json|console)$",
        description="auto = console on a TTY, JSON otherwise"
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)

    def collect_errors(self) -> List[str]:
        """
        Check that every required value is present.

        Returns:
            List of problems (empty if valid)
        """
        return self.storage.validate_settings() + self.index.validate_settings()

    def require_valid(self) -> "AppConfig":
        """
        Raise ConfigurationError listing every problem found.

        Returns:
            self, for chaining
        """
        errors = self.collect_errors()
        if errors:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(errors)
            )
        return self

    def debug_dict(self) -> Dict[str, Any]:
        """Configuration with secrets masked."""
        return {
            'environment': self.environment,
            'log_level': self.log_level,
            'log_format': self.log_format,
            'storage': self.storage.debug_dict(),
            'index': self.index.debug_dict(),
            'ingest': self.ingest.model_dump(),
        }

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """
        Load all configs from environment.

        Raises:
            ConfigurationError: When a value cannot be parsed
        """
        try:
            return cls(
                environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
                log_level=_resolve_log_level(),
                log_format=os.environ.get("LOG_FORMAT", AppDefaults.LOG_FORMAT).lower(),
                storage=StorageConfig.from_environment(),
                index=IndexConfig.from_environment(),
                ingest=IngestConfig.from_environment(),
            )
        except (ValueError, PydanticValidationError) as e:
            raise ConfigurationError(f"Configuration could not be parsed: {e}") from e


def _resolve_log_level() -> str:
    if os.environ.get("DEBUG_LOGGING", "").lower() == "true":
        return "DEBUG"
    return os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL).upper()
