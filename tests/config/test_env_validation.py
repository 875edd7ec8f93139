"""
Environment variable validation tests.

Format rules for the source location, index and pipeline variables, and the
startup hook. Presence of required variables is covered by test_app_config.
"""

import logging

import pytest

from config.env_validation import (
    ENV_VAR_RULES,
    check_env_var,
    check_environment,
    log_validation_results,
)
from tests.factories.config_factories import make_cloud_id


def _check(var_name, value):
    return check_env_var(var_name, value, ENV_VAR_RULES[var_name])


class TestSourceLocationValidation:
    """STAC_SOURCE_LOCATION must be an abfs:// URL or a local path."""

    @pytest.mark.parametrize("value", [
        "abfs://stac-catalog",
        "abfs://stac-catalog/imagery/2020",
        "./fixtures/catalog",
        "/data/catalog",
    ])
    def test_supported_locations_accepted(self, value):
        assert _check("STAC_SOURCE_LOCATION", value) is None

    @pytest.mark.parametrize("value", ["s3://bucket/prefix", "abfs://UPPER/case", "https://host/catalog"])
    def test_unsupported_locations_rejected(self, value):
        problem = _check("STAC_SOURCE_LOCATION", value)
        assert problem is not None
        assert "STAC_SOURCE_LOCATION" in problem.message

    @pytest.mark.parametrize("value", [None, ""])
    def test_unset_is_left_to_app_config(self, value):
        assert _check("STAC_SOURCE_LOCATION", value) is None


class TestIndexValidation:

    @pytest.mark.parametrize("value", ["stac-items", "stac_items.v2", "catalog+2024"])
    def test_valid_index_names(self, value):
        assert _check("ELASTIC_INDEX", value) is None

    @pytest.mark.parametrize("value", ["STAC", "-items", "_items", "stac items"])
    def test_invalid_index_names(self, value):
        assert _check("ELASTIC_INDEX", value) is not None

    def test_issued_cloud_id_accepted(self):
        assert _check("ELASTIC_ID", make_cloud_id()) is None

    @pytest.mark.parametrize("value", ["not-a-cloud-id", "deployment:abc", " deployment"])
    def test_malformed_cloud_id_rejected(self, value):
        assert _check("ELASTIC_ID", value) is not None

    def test_problem_message_never_echoes_value(self):
        problem = _check("ELASTIC_PASSWORD", " leading-space-secret")
        assert problem is not None
        assert "leading-space-secret" not in problem.message


class TestPipelineValidation:

    @pytest.mark.parametrize("value", ["0", "-3", "ten", "2.5"])
    def test_concurrency_must_be_positive_int(self, value):
        assert _check("INGEST_MAX_CONCURRENCY", value) is not None

    @pytest.mark.parametrize("value", ["true", "FALSE", "1", "no"])
    def test_fail_on_dropped_booleans(self, value):
        assert _check("INGEST_FAIL_ON_DROPPED", value) is None

    def test_extension_needs_leading_dot(self):
        assert _check("INGEST_DOCUMENT_EXTENSION", "json") is not None


class TestCheckEnvironment:

    def test_only_set_variables_checked(self):
        assert check_environment({}) == []

    def test_every_malformed_variable_reported(self):
        problems = check_environment({
            "STAC_SOURCE_LOCATION": "s3://bucket/catalog",
            "ELASTIC_INDEX": "stac-items",
            "INGEST_MAX_CONCURRENCY": "lots",
            "LOG_FORMAT": "xml",
        })
        assert {p.var_name for p in problems} == {"STAC_SOURCE_LOCATION", "INGEST_MAX_CONCURRENCY", "LOG_FORMAT"}

    def test_complete_environment_has_no_problems(self):
        assert check_environment({
            "STAC_SOURCE_LOCATION": "abfs://stac-catalog/imagery",
            "STORAGE_ACCOUNT_NAME": "catalogstore",
            "ELASTIC_INDEX": "stac-items",
            "ELASTIC_ID": make_cloud_id(),
            "ELASTIC_USERNAME": "writer",
            "ELASTIC_PASSWORD": "secret",
        }) == []

    def test_reads_process_environment_by_default(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "VERBOSE")
        assert [p.var_name for p in check_environment()] == ["LOG_LEVEL"]


class TestLogValidationResults:

    def test_problems_logged_and_reported(self, caplog):
        logger = logging.getLogger("tests.env_validation")
        with caplog.at_level(logging.ERROR, logger="tests.env_validation"):
            assert log_validation_results(logger, {"ELASTIC_BULK_CHUNK_SIZE": "0"}) is False
        assert any("ELASTIC_BULK_CHUNK_SIZE" in r.getMessage() for r in caplog.records)

    def test_clean_environment_passes(self):
        assert log_validation_results(logging.getLogger("tests.env_validation"), {}) is True
