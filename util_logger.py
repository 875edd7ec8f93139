"""
Unified Logger System.

Structured logging for the STAC ingest run. JSON lines for log shippers,
readable console lines when attached to a terminal.

Design Principles:
    - Strong typing with dataclasses (stdlib only)
    - Enum safety for categories
    - Component-specific loggers
    - Clean factory pattern

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogFormat: Enum for output formats
    LogContext: Logging context dataclass
    JSONFormatter: One JSON object per line
    ConsoleFormatter: Human-readable lines for TTY output
    LoggerFactory: Factory for creating loggers
    log_exceptions: Exception logging decorator

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from dataclasses import dataclass
import asyncio
import logging
import sys
import os
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES - Aligned with layer architecture
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the ingest layers.

    Each layer has specific logging needs and levels.
    """
    CONTROLLER = "controller"  # Run orchestration layer
    SERVICE = "service"        # Normalization / pipeline / writer layer
    REPOSITORY = "repository"  # Object store access layer
    ADAPTER = "adapter"        # External integration layer (search index)


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


class LogFormat(Enum):
    """Output format for log handlers."""
    AUTO = "auto"        # console on a TTY, JSON otherwise
    JSON = "json"
    CONSOLE = "console"

    @classmethod
    def from_string(cls, value: str) -> 'LogFormat':
        """Create from string, case-insensitive."""
        return cls(value.lower())


# ============================================================================
# LOG CONTEXT - Correlation and tracking
# ============================================================================

@dataclass
class LogContext:
    """
    Context for log correlation across a single ingest run.
    """
    run_id: Optional[str] = None
    source_root: Optional[str] = None
    target_index: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'run_id': self.run_id,
                'source_root': self.source_root,
                'target_index': self.target_index,
            }.items() if v is not None
        }


# ============================================================================
# FORMATTERS
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    One object per line so log shippers can parse without multiline rules.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Readable single-line formatter for interactive runs.

    Component fields are dropped from the dimension suffix, everything
    else is rendered as key=value pairs after the message.
    """

    _HIDDEN_DIMENSIONS = ('component_type', 'component_name')

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime('%H:%M:%S')
        line = f"[{timestamp}] {record.levelname:<7} {record.name}: {record.getMessage()}"

        dimensions = getattr(record, 'custom_dimensions', None) or {}
        pairs = [
            f"{key}={value}" for key, value in dimensions.items()
            if key not in self._HIDDEN_DIMENSIONS
        ]
        if pairs:
            line = f"{line} ({', '.join(pairs)})"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _resolve_format(log_format: LogFormat, stream) -> LogFormat:
    """Resolve AUTO against the stream's TTY status."""
    if log_format is not LogFormat.AUTO:
        return log_format
    isatty = getattr(stream, 'isatty', None)
    return LogFormat.CONSOLE if isatty and isatty() else LogFormat.JSON


def _build_formatter(log_format: LogFormat, stream) -> logging.Formatter:
    if _resolve_format(log_format, stream) is LogFormat.CONSOLE:
        return ConsoleFormatter()
    return JSONFormatter()


def _level_from_environment() -> LogLevel:
    """Initial level before configuration is loaded (DEBUG_LOGGING wins over LOG_LEVEL)."""
    if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
        return LogLevel.DEBUG
    level = (os.getenv('LOG_LEVEL') or 'INFO').upper()
    return LogLevel[level] if level in LogLevel.__members__ else LogLevel.INFO


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "StacNormalizer"
        )
        logger.info("Normalizing document")
    """

    _default_level = _level_from_environment()
    _log_format = LogFormat.AUTO
    _created: List[logging.Logger] = []

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "FetchPipeline")
            context: Optional log context for correlation

        Returns:
            Configured Python logger
        """
        logger_name = f"{component_type.value}.{name}"
        logger = logging.getLogger(logger_name)
        logger.setLevel(cls._default_level.to_python_level())

        # One handler per logger, even when create_logger runs repeatedly
        if not getattr(logger, '_ingest_handler', None):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(_build_formatter(cls._log_format, sys.stdout))
            logger.addHandler(handler)
            logger._ingest_handler = handler
            logger.propagate = False
            cls._created.append(logger)

        # Context may change between runs, so the wrapper reads the attribute
        logger._ingest_context = context

        if not hasattr(logger, '_context_wrapped'):
            original_log = logger._log

            def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
                """Wrapper to inject context as custom dimensions."""
                if extra is None:
                    extra = {}

                active_context = getattr(logger, '_ingest_context', None)
                custom_dims = active_context.to_dict() if active_context else {}
                custom_dims['component_type'] = component_type.value
                custom_dims['component_name'] = name

                if 'custom_dimensions' in extra:
                    custom_dims.update(extra['custom_dimensions'])

                extra['custom_dimensions'] = custom_dims

                # +1 to account for this wrapper function
                original_log(level, msg, args, exc_info=exc_info, extra=extra,
                             stack_info=stack_info, stacklevel=stacklevel + 1)

            logger._log = log_with_context
            logger._context_wrapped = True

        return logger

    @classmethod
    def set_level(cls, level: str) -> None:
        """Apply a level to the factory default and every logger created so far."""
        cls._default_level = LogLevel.from_string(level)
        for logger in cls._created:
            logger.setLevel(cls._default_level.to_python_level())

    @classmethod
    def set_format(cls, log_format: str) -> None:
        """Switch output format for existing and future loggers."""
        cls._log_format = LogFormat.from_string(log_format)
        for logger in cls._created:
            handler = logger._ingest_handler
            handler.setFormatter(_build_formatter(cls._log_format, handler.stream))

    @classmethod
    def bind_context(cls, context: Optional[LogContext]) -> None:
        """Attach a run context to every logger created so far."""
        for logger in cls._created:
            logger._ingest_context = context


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to log exceptions with full context and re-raise them.

    Works on both plain and ``async def`` functions.

    Args:
        component_type: Optional component type for creating logger
        component_name: Optional component name for creating logger
        logger: Optional existing logger to use

    Example:
        @log_exceptions(ComponentType.CONTROLLER, "IngestOrchestrator")
        async def run(self):
            ...
    """
    def decorator(func):
        def _logger_for_call() -> logging.Logger:
            if logger:
                return logger
            if component_type and component_name:
                return LoggerFactory.create_logger(component_type, component_name)
            return LoggerFactory.create_logger(ComponentType.SERVICE, func.__module__ or "unknown")

        def _log_failure(e: Exception, args, kwargs):
            _logger_for_call().error(
                f"Exception in {func.__name__}",
                exc_info=True,
                extra={
                    'custom_dimensions': {
                        'function_name': func.__name__,
                        'function_module': func.__module__,
                        'exception_type': type(e).__name__,
                        'exception_message': str(e),
                        'function_args': str(args)[:500],
                        'function_kwargs': str(kwargs)[:500],
                        'traceback': traceback.format_exc()
                    }
                }
            )

        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(e, args, kwargs)
                    raise
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log_failure(e, args, kwargs)
                raise
        return wrapper
    return decorator
