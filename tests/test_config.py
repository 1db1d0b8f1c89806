"""Tests for configuration loading."""

import os

import pytest

from coverage_ledger.config import ServiceConfig, load_config
from coverage_ledger.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the user's home, cwd and environment out of config discovery."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("COVERAGE_LEDGER_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config == ServiceConfig()
        assert config.db_path == "coverage.db"
        assert config.port == 3000
        assert config.trend_backfill_limit == 10

    def test_frozen(self):
        config = ServiceConfig()
        with pytest.raises(Exception):
            config.port = 1  # type: ignore[misc]


class TestValidation:
    def test_bad_port(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            ServiceConfig(port=0)
        assert exc_info.value.key == "port"

    def test_negative_backfill(self):
        with pytest.raises(InvalidConfigError):
            ServiceConfig(trend_backfill_limit=-1)

    def test_bad_verbosity(self):
        with pytest.raises(InvalidConfigError):
            ServiceConfig(verbosity="loud")  # type: ignore[arg-type]

    def test_invalid_config_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            ServiceConfig(db_path="")


class TestSources:
    def test_project_file(self, tmp_path):
        (tmp_path / "coverage-ledger.toml").write_text('db_path = "project.db"\nport = 4000\n')
        config = load_config()
        assert config.db_path == "project.db"
        assert config.port == 4000

    def test_explicit_file_overrides_project_file(self, tmp_path):
        (tmp_path / "coverage-ledger.toml").write_text("port = 4000\n")
        explicit = tmp_path / "custom.toml"
        explicit.write_text("port = 5000\n")
        assert load_config(config_file=explicit).port == 5000

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(config_file=tmp_path / "nope.toml")

    def test_unknown_key(self, tmp_path):
        (tmp_path / "coverage-ledger.toml").write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "coverage-ledger.toml").write_text("port = 4000\n")
        monkeypatch.setenv("COVERAGE_LEDGER_PORT", "4500")
        monkeypatch.setenv("COVERAGE_LEDGER_ACCESS_LOG", "off")
        config = load_config()
        assert config.port == 4500
        assert config.access_log is False

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_LEDGER_PORT", "lots")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("COVERAGE_LEDGER_DB_PATH", "env.db")
        config = load_config(db_path=None, port=6000)
        assert config.db_path == "env.db"
        assert config.port == 6000

    def test_verbose_flag(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"
