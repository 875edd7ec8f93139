# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Startup format checks with regex patterns
# PURPOSE: Reject malformed env vars at startup with actionable messages
# ============================================================================
"""
Environment Variable Validation Module.

Checks the FORMAT of every variable that is set, before the configuration
is built and before the run lists a single key. Whether required variables
are present is decided once, by ``AppConfig.collect_errors()``; unset
variables are skipped here.

Usage:
    from config.env_validation import check_environment

    for problem in check_environment():
        print(f"{problem.var_name}: {problem.message}")

Exports:
    ENV_VAR_RULES: Format rule per variable
    EnvVarRule: Rule definition
    EnvVarProblem: One malformed variable
    check_env_var: Check one value against its rule
    check_environment: Check every variable that is set
    log_validation_results: Startup hook used by the entry point
"""

import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Pattern

from .index_config import cloud_id_is_valid


# ============================================================================
# RULES AND PROBLEMS
# ============================================================================

@dataclass(frozen=True)
class EnvVarRule:
    """
    Format rule for one environment variable.

    Attributes:
        pattern: Regex the whole value must match
        pattern_description: Human-readable description of the expected format
        example: Example valid value
        check: Extra predicate for formats a regex cannot express
    """
    pattern: Pattern
    pattern_description: str
    example: str
    check: Optional[Callable[[str], bool]] = None

    def accepts(self, value: str) -> bool:
        if not self.pattern.match(value):
            return False
        return self.check is None or self.check(value)


@dataclass
class EnvVarProblem:
    """A variable that is set but malformed."""
    var_name: str
    expected: str
    example: str

    @property
    def message(self) -> str:
        return f"{self.var_name} is malformed (expected {self.expected}, e.g. '{self.example}')"


# ============================================================================
# VALIDATION RULES - Single source of truth for env var formats
# ============================================================================

_SOURCE_LOCATION = re.compile(r"^(abfs://[a-z0-9](?:[a-z0-9-]{1,61})[a-z0-9](/.*)?|[^:]+)$")
_AZURE_STORAGE_ACCOUNT = re.compile(r"^[a-z0-9]{3,24}$")
_CONNECTION_STRING = re.compile(r"^(DefaultEndpointsProtocol|BlobEndpoint|AccountName|UseDevelopmentStorage)=.+$")
_INDEX_NAME = re.compile(r"^[a-z0-9][a-z0-9._+-]{0,254}$")
_NON_EMPTY = re.compile(r"^\S.*$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_EXTENSION = re.compile(r"^\.[A-Za-z0-9._-]+$")


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # Source
    "STAC_SOURCE_LOCATION": EnvVarRule(
        _SOURCE_LOCATION, "abfs://<container>/<prefix> or a local directory path", "abfs://stac-catalog/imagery",
    ),
    "STORAGE_ACCOUNT_NAME": EnvVarRule(
        _AZURE_STORAGE_ACCOUNT, "lowercase alphanumeric, 3-24 characters", "mycatalogstore",
    ),
    "AZURE_STORAGE_CONNECTION_STRING": EnvVarRule(
        _CONNECTION_STRING, "an Azure storage connection string",
        "DefaultEndpointsProtocol=https;AccountName=...;AccountKey=...",
    ),

    # Search index
    "ELASTIC_INDEX": EnvVarRule(
        _INDEX_NAME, "a lowercase index name (letters, numbers, . _ + -)", "stac-items",
    ),
    "ELASTIC_ID": EnvVarRule(
        _NON_EMPTY, "an Elastic Cloud id copied from the deployment page",
        "my-deployment:dXMtZWFzdC0xLmF3cy5mb3VuZC5pbyQ...",
        check=cloud_id_is_valid,
    ),
    "ELASTIC_USERNAME": EnvVarRule(_NON_EMPTY, "a username without leading whitespace", "stac-writer"),
    "ELASTIC_PASSWORD": EnvVarRule(_NON_EMPTY, "a password without leading whitespace", "********"),
    "ELASTIC_BULK_CHUNK_SIZE": EnvVarRule(_POSITIVE_INT, "a positive integer (documents per chunk)", "500"),
    "ELASTIC_REQUEST_TIMEOUT": EnvVarRule(_POSITIVE_INT, "a positive integer (seconds)", "30"),

    # Ingest pipeline
    "INGEST_MAX_CONCURRENCY": EnvVarRule(_POSITIVE_INT, "a positive integer (in-flight fetches)", "25"),
    "INGEST_DOCUMENT_EXTENSION": EnvVarRule(_EXTENSION, "a file extension starting with a dot", ".json"),
    "INGEST_FAIL_ON_DROPPED": EnvVarRule(_BOOLEAN, "a boolean (true/false)", "false"),

    # Observability
    "LOG_LEVEL": EnvVarRule(
        re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE),
        "DEBUG, INFO, WARNING, ERROR or CRITICAL", "INFO",
    ),
    "LOG_FORMAT": EnvVarRule(re.compile(r"^(auto|json|console)$", re.IGNORECASE), "auto, json or console", "json"),
    "ENVIRONMENT": EnvVarRule(
        re.compile(r"^(dev|qa|uat|test|staging|prod|production)$", re.IGNORECASE),
        "dev, qa, uat, test, staging or prod", "dev",
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def check_env_var(var_name: str, value: Optional[str], rule: EnvVarRule) -> Optional[EnvVarProblem]:
    """Problem for a malformed value; None when the value is fine or unset."""
    if not value:
        return None
    if rule.accepts(value):
        return None
    return EnvVarProblem(var_name=var_name, expected=rule.pattern_description, example=rule.example)


def check_environment(environ: Optional[Mapping[str, str]] = None,
                      rules: Optional[Dict[str, EnvVarRule]] = None) -> List[EnvVarProblem]:
    """
    Check every variable that has a rule.

    Args:
        environ: Variables to check (defaults to os.environ)
        rules: Rules to apply (defaults to ENV_VAR_RULES)
    """
    environ = os.environ if environ is None else environ
    rules = ENV_VAR_RULES if rules is None else rules

    problems = []
    for var_name, rule in rules.items():
        problem = check_env_var(var_name, environ.get(var_name), rule)
        if problem:
            problems.append(problem)
    return problems


def log_validation_results(logger, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Log every malformed variable at ERROR.

    Returns:
        True when every variable that is set is well-formed
    """
    problems = check_environment(environ)
    for problem in problems:
        logger.error(f"ENV VAR ERROR: {problem.message}", extra={'custom_dimensions': {
            'var_name': problem.var_name, 'expected': problem.expected,
        }})

    if problems:
        logger.error(f"STARTUP_FAILED: {len(problems)} malformed environment variables")
        return False
    logger.debug("Environment variable formats OK")
    return True


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "EnvVarProblem",
    "check_env_var",
    "check_environment",
    "log_validation_results",
]
