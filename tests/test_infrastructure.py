"""Consolidated infrastructure and configuration tests.

This module covers:
- Settings and environment variable handling
- config.yaml template substitution and loading
- Context manager and configuration overrides
- Logging setup
"""

import json
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from loguru import logger

from src.product_api.api.utils.app_startup import configure_logging
from src.product_api.runtime.config.config_data import (
    ConfigData,
    DatabaseConfig,
    ExecutionConfig,
    LoggingConfig,
)
from src.product_api.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)
from src.product_api.runtime.context import (
    get_config,
    merge_config,
    set_config,
    with_context,
)
from src.product_api.runtime.settings import EnvironmentVariables


class TestEnvironmentSettings:
    """Test environment variable handling and settings."""

    def test_default_settings(self):
        with patch.dict(os.environ, {}, clear=True):
            env_vars = EnvironmentVariables(_env_file=None)

            assert env_vars.environment == "development"
            assert env_vars.config_file == "config.yaml"

    def test_environment_variable_loading(self):
        test_env = {"APP_ENVIRONMENT": "production", "APP_CONFIG_FILE": "/etc/app.yaml"}

        with patch.dict(os.environ, test_env, clear=True):
            env_vars = EnvironmentVariables(_env_file=None)

            assert env_vars.environment == "production"
            assert env_vars.config_file == "/etc/app.yaml"


class TestTemplateSubstitution:
    """Test ${VAR} placeholder substitution."""

    def test_required_variable(self):
        with patch.dict(os.environ, {"DB_URL": "sqlite://"}):
            assert substitute_env_vars("url: ${DB_URL}") == "url: sqlite://"

    def test_default_value(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("delay: ${DELAY:-20}") == "delay: 20"

    def test_default_is_ignored_when_set(self):
        with patch.dict(os.environ, {"DELAY": "5"}):
            assert substitute_env_vars("delay: ${DELAY:-20}") == "delay: 5"

    def test_missing_required_variable_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING"):
                substitute_env_vars("${MISSING}")

    def test_custom_error_message(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="set the database"):
                substitute_env_vars("${DB:?set the database}")


class TestConfigLoading:
    """Test loading config.yaml into ConfigData."""

    def test_missing_file_falls_back_to_defaults(self, tmp_path: Path):
        config = load_templated_yaml(tmp_path / "absent.yaml")

        assert config == ConfigData()
        assert config.execution.enabled_by_default is True
        assert config.execution.operation_delay_ms == 20
        assert config.execution.item_delay_ms == 10

    def test_load_with_substitution(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "config:\n"
            "  database:\n"
            "    url: ${TEST_DB_URL:-sqlite://}\n"
            "  execution:\n"
            "    enabled_by_default: false\n"
            "    operation_delay_ms: ${OP_DELAY:-20}\n"
        )

        with patch.dict(os.environ, {"OP_DELAY": "50"}):
            config = load_templated_yaml(config_file)

        assert config.database.url == "sqlite://"
        assert config.execution.enabled_by_default is False
        assert config.execution.operation_delay_ms == 50
        assert config.execution.operation_delay == 0.05

    def test_environment_prefixed_overrides(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("config:\n  database:\n    url: ${PRODUCT_DB:-sqlite://}\n")

        with patch.dict(os.environ, {"TEST_PRODUCT_DB": "sqlite:///./override.db"}):
            config = load_templated_yaml(config_file, env_mode="test")

        assert config.database.url == "sqlite:///./override.db"

    def test_invalid_configuration_raises(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("config:\n  execution:\n    item_delay_ms: -1\n")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(config_file)

    def test_empty_file_raises(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with pytest.raises(ValueError):
            load_templated_yaml(config_file)

    def test_repository_config_file_is_valid(self):
        config_file = Path(__file__).resolve().parents[1] / "config.yaml"

        config = load_templated_yaml(config_file)

        assert config.app.api_prefix == ""
        assert config.execution.operation_delay_ms >= 0


class TestConfigData:
    """Test computed configuration values."""

    @pytest.mark.parametrize(
        ("url", "is_sqlite", "is_in_memory"),
        [
            ("sqlite://", True, True),
            ("sqlite:///:memory:", True, True),
            ("sqlite:///./products.db", True, False),
            ("postgresql://user:pw@db:5432/products", False, False),
        ],
    )
    def test_database_flags(self, url: str, is_sqlite: bool, is_in_memory: bool):
        config = DatabaseConfig(url=url)

        assert config.is_sqlite is is_sqlite
        assert config.is_in_memory is is_in_memory


class TestContextManager:
    """Test context-scoped configuration overrides."""

    def test_partial_override_inherits_other_fields(self):
        original = get_config()
        override = ConfigData(execution=ExecutionConfig(operation_delay_ms=0))

        with with_context(override):
            config = get_config()
            assert config.execution.operation_delay_ms == 0
            assert config.execution.item_delay_ms == original.execution.item_delay_ms
            assert config.database.url == original.database.url

        assert get_config() == original

    def test_none_override_is_noop(self):
        original = get_config()

        with with_context(None):
            assert get_config() == original

    def test_invalid_override_type(self):
        with pytest.raises(ValueError):
            with with_context({"execution": {"operation_delay_ms": 0}}):
                pass

    def test_nested_overrides(self):
        outer = ConfigData(database=DatabaseConfig(url="sqlite://"))
        inner = ConfigData(execution=ExecutionConfig(enabled_by_default=False))

        with with_context(outer):
            with with_context(inner):
                config = get_config()
                assert config.database.url == "sqlite://"
                assert config.execution.enabled_by_default is False
            assert get_config().execution.enabled_by_default is True

    def test_merge_config_keeps_unset_fields(self):
        base = ConfigData(database=DatabaseConfig(url="sqlite:///./base.db"))
        override = ConfigData(execution=ExecutionConfig(item_delay_ms=0))

        merged = merge_config(base, override)

        assert merged.database.url == "sqlite:///./base.db"
        assert merged.execution.item_delay_ms == 0
        assert merged.execution.operation_delay_ms == 20

    def test_set_config_replaces_configuration(self):
        original = get_config()
        try:
            set_config(ConfigData(database=DatabaseConfig(url="sqlite://")))
            assert get_config().database.url == "sqlite://"
        finally:
            set_config(original)


class TestLogging:
    """Test loguru configuration."""

    def test_stdlib_logging_is_forwarded(self):
        configure_logging(ConfigData(logging=LoggingConfig(level="DEBUG")))
        messages: list[str] = []
        sink_id = logger.add(lambda message: messages.append(message.record["message"]))

        try:
            logging.getLogger("some.library").warning("forwarded from stdlib")
        finally:
            logger.remove(sink_id)

        assert "forwarded from stdlib" in messages

    def test_file_sink(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "app.log"
        configure_logging(
            ConfigData(logging=LoggingConfig(level="INFO", format="plain", file=str(log_file)))
        )

        logger.info("written to file")
        logger.complete()
        configure_logging(ConfigData())

        assert log_file.exists()
        assert "written to file" in log_file.read_text()

    def test_uvicorn_access_log_is_dropped(self):
        configure_logging(ConfigData(logging=LoggingConfig(level="DEBUG")))
        messages: list[str] = []
        sink_id = logger.add(lambda message: messages.append(message.record["message"]))

        try:
            logging.getLogger("uvicorn.access").info("GET /products 200")
            logging.getLogger("uvicorn.error").info("Started server process")
        finally:
            logger.remove(sink_id)

        assert "GET /products 200" not in messages
        assert "Started server process" in messages

    def test_sqlalchemy_loggers_are_quieted(self):
        configure_logging(ConfigData(logging=LoggingConfig(level="DEBUG")))

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.pool").level == logging.WARNING

    def test_json_file_sink_carries_request_id(self, tmp_path: Path):
        log_file = tmp_path / "app.jsonl"
        configure_logging(
            ConfigData(logging=LoggingConfig(level="INFO", format="json", file=str(log_file)))
        )

        with logger.contextualize(request_id="req-42"):
            logger.info("find_all - async mode enabled: True")
        logger.info("outside a request")
        logger.complete()
        configure_logging(ConfigData())

        records = [json.loads(line)["record"] for line in log_file.read_text().splitlines()]
        by_message = {record["message"]: record["extra"] for record in records}
        assert by_message["find_all - async mode enabled: True"]["request_id"] == "req-42"
        assert by_message["outside a request"]["request_id"] == "-"
