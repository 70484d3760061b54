"""
Unit tests for environment-driven Config loading.
"""

import pytest

from arcade.core.config.config import Config, Environment

pytestmark = pytest.mark.unit

_ATTRS = (
    "DATABASE_URL",
    "DATABASE_POOL_SIZE",
    "DATABASE_MAX_OVERFLOW",
    "DATABASE_POOL_RECYCLE",
    "DATABASE_POOL_TIMEOUT",
    "DATABASE_STATEMENT_TIMEOUT_MS",
    "DATABASE_ECHO",
    "ENVIRONMENT",
    "TESTING",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_COLORS",
    "LOG_TO_FILE",
    "LOGS_DIR",
    "CONFIG_DIR",
)


@pytest.fixture
def reload_config():
    saved = {name: getattr(Config, name) for name in _ATTRS}

    def _reload():
        Config.load()
        return Config

    yield _reload

    for name, value in saved.items():
        setattr(Config, name, value)


class TestConfigLoad:
    def test_reads_integers(self, monkeypatch, reload_config):
        monkeypatch.setenv("DATABASE_POOL_SIZE", "25")

        assert reload_config().DATABASE_POOL_SIZE == 25

    @pytest.mark.parametrize("raw", ["lots", "0", "999"])
    def test_invalid_integers_fall_back(self, monkeypatch, reload_config, raw):
        monkeypatch.setenv("DATABASE_POOL_SIZE", raw)

        assert reload_config().DATABASE_POOL_SIZE == 10

    @pytest.mark.parametrize("raw,expected", [("yes", True), ("off", False), ("maybe", False)])
    def test_booleans(self, monkeypatch, reload_config, raw, expected):
        monkeypatch.setenv("DATABASE_ECHO", raw)

        assert reload_config().DATABASE_ECHO is expected

    def test_unknown_log_level_becomes_info(self, monkeypatch, reload_config):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        assert reload_config().LOG_LEVEL == "INFO"

    def test_config_dir_override(self, monkeypatch, reload_config, tmp_path):
        monkeypatch.setenv("CONFIG_DIR", str(tmp_path))

        assert reload_config().CONFIG_DIR == tmp_path

    def test_environment_checks(self, monkeypatch, reload_config):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("TESTING", "false")

        config = reload_config()

        assert config.is_production() is True
        assert config.is_testing() is False
        assert config.get_config_summary()["environment"] == "production"


class TestEnvironment:
    def test_case_insensitive(self):
        assert Environment.from_string("PRODUCTION") is Environment.PRODUCTION
        assert Environment.from_string("Testing") is Environment.TESTING

    def test_unknown_defaults_to_development(self):
        assert Environment.from_string("staging-ish") is Environment.DEVELOPMENT
