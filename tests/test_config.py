"""Tests for host configuration loading."""

from pathlib import Path

import pytest

from blip_utils.config import (
    CONFIG_ENV_VAR,
    DEFAULT_EXCEPTION_VARIABLE,
    HostConfig,
    get_config_path,
    load_config,
)
from blip_utils.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Never read the real user config."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr("blip_utils.config.DEFAULT_CONFIG_PATH", tmp_path / "absent" / "config.yaml")


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestHostConfig:
    """Tests for HostConfig defaults and validation."""

    def test_defaults(self):
        config = HostConfig()
        assert config.bot_timezone is None
        assert config.use_bot_timezone is False
        assert config.capture_exceptions is False
        assert config.exception_variable == DEFAULT_EXCEPTION_VARIABLE
        assert config.http_timeout == 30.0
        assert config.event_log is None
        config.validate()

    def test_to_dict(self):
        config = HostConfig(event_log=Path("/tmp/events.jsonl"))
        assert config.to_dict()["event_log"] == "/tmp/events.jsonl"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"bot_timezone": "Atlantis/Capital"},
            {"bot_timezone": 3},
            {"use_bot_timezone": "maybe"},
            {"capture_exceptions": 1},
            {"exception_variable": ""},
            {"http_timeout": 0},
            {"http_timeout": "fast"},
            {"http_timeout": True},
            {"event_log": 5},
            {"event_log": ["a"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            HostConfig(**kwargs).validate()


class TestConfigPath:
    """Tests for config file resolution."""

    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))
        assert get_config_path(tmp_path / "explicit.yaml") == tmp_path / "explicit.yaml"

    def test_env_var(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))
        assert get_config_path() == tmp_path / "env.yaml"

    def test_default(self, tmp_path):
        assert get_config_path() == tmp_path / "absent" / "config.yaml"


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_default_gives_defaults(self):
        assert load_config() == HostConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_missing_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.yaml"))
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_full_file(self, tmp_path):
        path = _write(
            tmp_path / "config.yaml",
            "bot_timezone: America/Manaus\n"
            "use_bot_timezone: true\n"
            "capture_exceptions: true\n"
            "exception_variable: lastError\n"
            "http_timeout: 5\n"
            "event_log: ~/events.jsonl\n",
        )
        config = load_config(path)

        assert config.bot_timezone == "America/Manaus"
        assert config.use_bot_timezone is True
        assert config.capture_exceptions is True
        assert config.exception_variable == "lastError"
        assert config.http_timeout == 5
        assert config.event_log == Path("~/events.jsonl").expanduser()

    def test_env_file(self, monkeypatch, tmp_path):
        path = _write(tmp_path / "env.yaml", "capture_exceptions: true\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().capture_exceptions is True

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path / "c.yaml", "")) == HostConfig()

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(_write(tmp_path / "c.yaml", "bot_timezone: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path / "c.yaml", "- a\n- b\n"))

    def test_unknown_keys(self, tmp_path):
        with pytest.raises(ConfigError, match="unknown config keys.*workspace"):
            load_config(_write(tmp_path / "c.yaml", "workspace: x\n"))

    @pytest.mark.parametrize("value", ["5", "true", "[a]", "{path: x}"])
    def test_event_log_must_be_a_path(self, tmp_path, value):
        """Non-string event_log values are config errors, not crashes."""
        with pytest.raises(ConfigError, match="event_log"):
            load_config(_write(tmp_path / "c.yaml", f"event_log: {value}\n"))

    def test_empty_event_log_disables_logging(self, tmp_path):
        assert load_config(_write(tmp_path / "c.yaml", "event_log: \"\"\n")).event_log is None

    def test_unknown_timezone(self, tmp_path):
        with pytest.raises(ConfigError, match="Unknown time zone"):
            load_config(_write(tmp_path / "c.yaml", "bot_timezone: Nowhere/Town\n"))
