"""
Tests for config/config.py.

Tests ServiceConfig functionality including:
- YAML and TOML loading
- Validation of cmds, shell and timing values
- Environment variable overrides
- File size validation
- Default config and log file paths
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from cmdsvc.config import ServiceConfig, default_config_path
from cmdsvc.config.config import _apply_env_overrides
from cmdsvc.exceptions import ConfigError

# =============================================================================
# Test loading
# =============================================================================


@pytest.mark.unit
class TestLoad:
    """Test ServiceConfig.load()."""

    def test_load_yaml(self, config_file):
        """Test loading a YAML config file."""
        config = ServiceConfig.load(config_file, enable_env_overrides=False)

        assert config.cmds == ["echo one", "echo two", "sleep 30"]
        assert config.poll_interval == 0.05
        assert config.kill_timeout == 5.0
        assert config.logging.level == "debug"
        assert config.path == config_file.resolve()

    def test_load_toml(self, write_config):
        """Test loading a TOML config file."""
        path = write_config(
            'cmds = ["echo hi", "exit 3"]\n\n[logging]\nlevel = "warning"\n',
            name="svc.toml",
        )

        config = ServiceConfig.load(path, enable_env_overrides=False)

        assert config.cmds == ["echo hi", "exit 3"]
        assert config.get("logging.level") == "warning"

    def test_defaults(self, write_config):
        """Test optional keys get their defaults."""
        with patch("cmdsvc.core.shell.sys.platform", "linux"):
            config = ServiceConfig.load(
                write_config({"cmds": []}), enable_env_overrides=False
            )

        assert config.cmds == []
        assert config.shell == ["sh", "-c"]
        assert config.poll_interval == 0.1
        assert config.kill_timeout == 10.0

    def test_missing_file(self, temp_dir):
        """Test a missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="config file not found"):
            ServiceConfig.load(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, write_config):
        """Test a YAML syntax error raises ConfigError with the cause chained."""
        path = write_config("cmds: [unclosed\n")

        with pytest.raises(ConfigError, match="unable to parse") as exc_info:
            ServiceConfig.load(path)

        assert exc_info.value.__cause__ is not None

    def test_invalid_toml(self, write_config):
        path = write_config("cmds = [\n", name="svc.toml")

        with pytest.raises(ConfigError, match="unable to parse"):
            ServiceConfig.load(path)

    def test_file_too_large(self, config_file):
        """Test files over the size limit are rejected."""
        with patch("cmdsvc.config.config.MAX_CONFIG_SIZE_BYTES", 10):
            with pytest.raises(ConfigError, match="exceeding maximum size"):
                ServiceConfig.load(config_file)


# =============================================================================
# Test validation
# =============================================================================


@pytest.mark.unit
class TestValidation:
    """Test config validation."""

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"cmds": "echo hi"},
            {"cmds": ["echo hi", 3]},
            {"cmds": [], "shell": []},
            {"cmds": [], "shell": ["sh", 1]},
            {"cmds": [], "logging": "debug"},
            {"cmds": [], "poll_interval": 0},
            {"cmds": [], "kill_timeout": -1},
            {"cmds": [], "kill_timeout": "soon"},
            {"cmds": [], "poll_interval": True},
            {"cmds": [], "get": 1},
        ],
    )
    def test_invalid(self, data):
        """Test invalid configurations raise ConfigError."""
        with pytest.raises(ConfigError):
            ServiceConfig(data)

    def test_duplicate_commands_kept(self):
        """Test duplicate command lines stay independent entries."""
        config = ServiceConfig({"cmds": ["echo a", "echo a"]})
        assert config.cmds == ["echo a", "echo a"]

    def test_shell_string(self):
        """Test a single-string shell becomes a one-element prefix."""
        config = ServiceConfig({"cmds": [], "shell": "/bin/run-one"})
        assert config.shell == ["/bin/run-one"]

    def test_dict_excludes_private_state(self):
        config = ServiceConfig({"cmds": ["a"]}, path=Path("/tmp/x.yaml"))
        assert "_path" not in config.dict()
        assert config.dict()["cmds"] == ["a"]


# =============================================================================
# Test environment overrides
# =============================================================================


@pytest.mark.unit
class TestEnvOverrides:
    """Test CMDSVC_* environment overrides."""

    def test_nested_key(self):
        data = _apply_env_overrides({"cmds": []}, {"CMDSVC_LOGGING_LEVEL": "debug"})
        assert data["logging"] == {"level": "debug"}

    def test_underscore_key(self):
        """Test keys containing underscores are matched greedily."""
        data = _apply_env_overrides(
            {"cmds": []},
            {"CMDSVC_POLL_INTERVAL": "0.5", "CMDSVC_KILL_TIMEOUT": "3"},
        )
        assert data["poll_interval"] == 0.5
        assert data["kill_timeout"] == 3

    def test_list_value(self):
        """Test flow lists are parsed as YAML."""
        data = _apply_env_overrides({"cmds": []}, {"CMDSVC_CMDS": '["a", "b c"]'})
        assert data["cmds"] == ["a", "b c"]

    def test_other_variables_ignored(self):
        data = _apply_env_overrides({"cmds": []}, {"HOME": "/root", "CMDSVC_": "x"})
        assert data == {"cmds": []}

    def test_load_applies_overrides(self, config_file):
        config = ServiceConfig.load(
            config_file, environ={"CMDSVC_LOGGING_LEVEL": "warning"}
        )
        assert config.logging.level == "warning"

    def test_load_without_overrides(self, config_file):
        config = ServiceConfig.load(
            config_file,
            enable_env_overrides=False,
            environ={"CMDSVC_LOGGING_LEVEL": "warning"},
        )
        assert config.logging.level == "debug"


# =============================================================================
# Test paths
# =============================================================================


@pytest.mark.unit
class TestPaths:
    """Test default config path and log file resolution."""

    def test_default_config_path_yaml(self, temp_dir):
        """Test the default config is <program>.yaml next to the program."""
        program = temp_dir / "runner"
        assert default_config_path(str(program)) == (temp_dir / "runner.yaml").resolve()

    def test_default_config_path_toml_fallback(self, temp_dir):
        """Test an existing <program>.toml is used when no YAML file exists."""
        (temp_dir / "runner.toml").write_text("cmds = []\n")
        program = temp_dir / "runner.exe"

        assert default_config_path(str(program)) == (temp_dir / "runner.toml").resolve()

    def test_log_file_auto(self, write_config):
        path = write_config({"cmds": [], "logging": {"file": "auto"}})
        config = ServiceConfig.load(path, enable_env_overrides=False)

        assert config.log_file_path() == path.resolve().with_suffix(".log")

    def test_log_file_relative(self, write_config):
        path = write_config({"cmds": [], "logging": {"file": "logs/svc.log"}})
        config = ServiceConfig.load(path, enable_env_overrides=False)

        assert config.log_file_path() == path.resolve().parent / "logs" / "svc.log"

    def test_log_file_none(self):
        assert ServiceConfig({"cmds": []}).log_file_path() is None

    def test_log_file_auto_without_path(self):
        config = ServiceConfig({"cmds": [], "logging": {"file": "auto"}})
        with pytest.raises(ConfigError):
            config.log_file_path()

    def test_log_config(self, write_config):
        path = write_config(
            {"cmds": [], "logging": {"level": "debug", "colors": False, "file": "auto"}}
        )
        log_config = ServiceConfig.load(path, enable_env_overrides=False).log_config()

        assert log_config.level == logging.DEBUG
        assert log_config.colors is False
        assert log_config.file == str(path.resolve().with_suffix(".log"))
