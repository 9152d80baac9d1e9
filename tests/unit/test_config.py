"""
Unit tests for parser configuration and logging setup.
"""

import logging

import pytest

from spanparse import ParserConfig, parse_http_request, setup_logging


class TestParserConfig:
    """Tests for ParserConfig."""

    def test_defaults(self, config):
        """Test default values."""
        assert config.max_headers == 128
        assert config.allow_bare_lf is True
        assert config.max_json_depth == 128
        assert config.allow_trailing_data is False
        assert config.log_level == "WARNING"

    def test_immutable(self, config):
        """Test configs cannot be modified."""
        with pytest.raises(AttributeError):
            config.max_headers = 1

    def test_from_env(self, monkeypatch):
        """Test loading configuration from the environment."""
        monkeypatch.setenv("SPANPARSE_MAX_HEADERS", "16")
        monkeypatch.setenv("SPANPARSE_ALLOW_BARE_LF", "no")
        monkeypatch.setenv("SPANPARSE_MAX_JSON_DEPTH", "8")
        monkeypatch.setenv("SPANPARSE_ALLOW_TRAILING_DATA", "yes")
        monkeypatch.setenv("SPANPARSE_LOG_LEVEL", "DEBUG")

        config = ParserConfig.from_env()

        assert config.max_headers == 16
        assert config.allow_bare_lf is False
        assert config.max_json_depth == 8
        assert config.allow_trailing_data is True
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        """Test from_env with nothing set."""
        for name in (
            "SPANPARSE_MAX_HEADERS",
            "SPANPARSE_ALLOW_BARE_LF",
            "SPANPARSE_MAX_JSON_DEPTH",
            "SPANPARSE_ALLOW_TRAILING_DATA",
            "SPANPARSE_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        assert ParserConfig.from_env() == ParserConfig()

    def test_from_env_invalid(self, monkeypatch):
        """Test that invalid environment values fail fast."""
        monkeypatch.setenv("SPANPARSE_MAX_JSON_DEPTH", "0")
        with pytest.raises(ValueError):
            ParserConfig.from_env()

    def test_validated_on_construction(self):
        """Test invalid values are rejected when the config is built."""
        with pytest.raises(ValueError):
            ParserConfig(max_json_depth=5000)
        with pytest.raises(ValueError):
            ParserConfig(max_headers=-1)

    def test_depth_limit_bounds(self):
        """Test the accepted range of max_json_depth."""
        assert ParserConfig(max_json_depth=1).max_json_depth == 1
        assert ParserConfig(max_json_depth=256).max_json_depth == 256
        with pytest.raises(ValueError):
            ParserConfig(max_json_depth=257)

    @pytest.mark.parametrize("kwargs", [
        {"max_headers": -1},
        {"max_json_depth": 0},
        {"max_json_depth": 5000},
        {"log_level": "LOUD"},
    ])
    def test_validate(self, kwargs):
        """Test validation of nonsensical values."""
        with pytest.raises(ValueError):
            ParserConfig(**kwargs).validate()


class TestLogging:
    """Tests for logging setup and parser log output."""

    @pytest.fixture(autouse=True)
    def restore_level(self):
        logger = logging.getLogger("spanparse")
        level = logger.level
        yield
        logger.setLevel(level)

    def test_setup_logging_level(self):
        """Test the package logger level follows the config."""
        setup_logging(ParserConfig(log_level="debug"))
        assert logging.getLogger("spanparse").level == logging.DEBUG

    def test_parse_logs_at_debug(self, caplog, sample_get_request):
        """Test parsers log successful parses at DEBUG."""
        caplog.set_level(logging.DEBUG, logger="spanparse")
        parse_http_request(sample_get_request)

        assert any("Parsed request GET" in r.getMessage() for r in caplog.records)
