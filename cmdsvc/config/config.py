"""
Service configuration loading.

Loads the command list and service settings from a YAML (PyYAML) or TOML
(tomllib) file, applies CMDSVC_* environment overrides and validates the
result. Example YAML:

    cmds:
      - "python -m http.server 8000"
      - "redis-server --port 6380"
    logging:
      level: info
      file: auto
"""

from __future__ import annotations

import os
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ..core.shell import default_shell
from ..dot_dict import DotDict
from ..exceptions import ConfigError
from ..log import LogConfig, LogConstants
from .constants import (
    CONFIG_SUFFIXES,
    DEFAULT_KILL_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    ENV_PREFIX,
    MAX_CONFIG_SIZE_BYTES,
)

_KNOWN_KEYS = ("cmds", "shell", "poll_interval", "kill_timeout", "logging")


def default_config_path(argv0: str | None = None) -> Path:
    """
    Derive the config path from the program path.

    ``/opt/svc/runner`` maps to ``/opt/svc/runner.yaml``; when no YAML file
    exists but a ``.yml`` or ``.toml`` one does, that one is used.

    Args:
        argv0: Program path (defaults to sys.argv[0])
    """
    program = Path(argv0 if argv0 is not None else sys.argv[0]).resolve()
    base = program.parent / program.stem
    for suffix in CONFIG_SUFFIXES:
        candidate = base.with_suffix(suffix)
        if candidate.is_file():
            return candidate
    return base.with_suffix(CONFIG_SUFFIXES[0])


def _check_file_size(path: Path) -> None:
    file_size = path.stat().st_size
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"configuration file is {file_size} bytes, exceeding maximum size of "
            f"{MAX_CONFIG_SIZE_BYTES} bytes",
            path=path,
        )


def _read_file(path: Path) -> Any:
    """Read and parse a config file, TOML by suffix and YAML otherwise."""
    try:
        _check_file_size(path)
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError("unable to read config file", path=path) from e

    try:
        if path.suffix == ".toml":
            return tomllib.loads(text)
        return yaml.safe_load(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigError("unable to parse config file", path=path) from e


def _resolve_key(parts: list[str], current: Mapping[str, Any], top: bool) -> int:
    """Return how many underscore-separated parts form the next key."""
    known = set(current) | (set(_KNOWN_KEYS) if top else set())
    for end in range(len(parts), 0, -1):
        if "_".join(parts[:end]) in known:
            return end
    return len(parts)


def _apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str], prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """
    Apply environment variable overrides.

    ``CMDSVC_LOGGING_LEVEL=debug`` sets ``logging.level``;
    ``CMDSVC_POLL_INTERVAL=0.5`` sets ``poll_interval``. Values are parsed as
    YAML scalars, so numbers, booleans and flow lists keep their types.
    """
    for name, raw in sorted(environ.items()):
        if not name.startswith(prefix) or name == prefix:
            continue

        parts = name[len(prefix) :].lower().split("_")
        current = data
        top = True
        while parts:
            n = _resolve_key(parts, current, top)
            key, parts = "_".join(parts[:n]), parts[n:]
            if not parts:
                try:
                    current[key] = yaml.safe_load(raw)
                except yaml.YAMLError:
                    current[key] = raw
                break
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
            top = False
    return data


def _require_positive(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{key}' must be a positive number", value=value)
    return float(value)


def _validate(data: Any) -> dict[str, Any]:
    """Validate raw config data and fill in defaults."""
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping", type=type(data).__name__)

    cmds = data.get("cmds")
    if not isinstance(cmds, list):
        raise ConfigError("'cmds' must be a list of command strings")
    for idx, cmd in enumerate(cmds):
        if not isinstance(cmd, str):
            raise ConfigError("command must be a string", index=idx, value=cmd)

    shell = data.get("shell")
    if shell is None:
        shell = default_shell()
    elif isinstance(shell, str):
        shell = [shell]
    if not isinstance(shell, list) or not shell or not all(
        isinstance(part, str) for part in shell
    ):
        raise ConfigError("'shell' must be a non-empty list of strings", value=shell)

    logging_section = data.get("logging") or {}
    if not isinstance(logging_section, dict):
        raise ConfigError("'logging' must be a mapping")

    validated = dict(data)
    validated.update(
        cmds=list(cmds),
        shell=list(shell),
        poll_interval=_require_positive(data, "poll_interval", DEFAULT_POLL_INTERVAL),
        kill_timeout=_require_positive(data, "kill_timeout", DEFAULT_KILL_TIMEOUT),
        logging=logging_section,
    )
    return validated


class ServiceConfig(DotDict):
    """
    Validated service configuration.

    Attributes:
        cmds: Command lines, one supervised subprocess each (may be empty)
        shell: Shell argv prefix the command line is appended to
        poll_interval: Seconds between cancellation checks of an idle waiter
        kill_timeout: Seconds to wait for a killed process to be reaped
        logging: Logging section (level, colors, micros, file)

    Example:
        config = ServiceConfig.load("/opt/svc/runner.yaml")
        for idx, cmd in enumerate(config.cmds):
            ...
    """

    _RESERVED_KEYS = DotDict._RESERVED_KEYS | {
        "path",
        "load",
        "log_config",
        "log_file_path",
    }

    def __init__(self, data: Mapping[str, Any], path: Path | None = None) -> None:
        """
        Validate and wrap configuration data.

        Args:
            data: Raw configuration mapping
            path: File the data was loaded from, if any

        Raises:
            ConfigError: If the data is invalid
        """
        validated = _validate(dict(data) if isinstance(data, Mapping) else data)
        try:
            super().__init__(**{str(k): v for k, v in validated.items()})
        except ValueError as e:
            raise ConfigError("invalid configuration key", path=path) from e
        self.__dict__["_path"] = path

    @classmethod
    def load(
        cls,
        path: str | Path,
        enable_env_overrides: bool = True,
        environ: Mapping[str, str] | None = None,
    ) -> ServiceConfig:
        """
        Load configuration from a YAML or TOML file.

        Args:
            path: Config file path
            enable_env_overrides: Whether to apply CMDSVC_* overrides
            environ: Environment to read overrides from (os.environ if None)

        Raises:
            ConfigError: If the file cannot be read, parsed or validated
        """
        resolved = Path(path).resolve()
        if not resolved.is_file():
            raise ConfigError("config file not found", path=resolved)

        data = _read_file(resolved)
        if enable_env_overrides and isinstance(data, dict):
            env = os.environ if environ is None else environ
            data = _apply_env_overrides(data, env)
        return cls(data, resolved)

    @property
    def path(self) -> Path | None:
        return self.__dict__["_path"]

    def dict(self) -> dict[str, Any]:
        return {k: v for k, v in super().dict().items() if not k.startswith("_")}

    def log_file_path(self, file: str | None = None) -> Path | None:
        """
        Resolve the log file path.

        "auto" maps to the config path with a ``.log`` suffix; a relative
        path is resolved against the config file's directory.

        Args:
            file: Value to resolve instead of ``logging.file``
        """
        if file is None:
            file = self.get("logging.file")
        if not file:
            return None
        if file == LogConstants.AUTO_FILE:
            if self.path is None:
                raise ConfigError("'logging.file: auto' requires a config file path")
            return self.path.with_suffix(".log")

        log_path = Path(str(file)).expanduser()
        if not log_path.is_absolute() and self.path is not None:
            log_path = self.path.parent / log_path
        return log_path

    def log_config(self) -> LogConfig:
        """Build the LogConfig described by the logging section."""
        section = self.logging.dict() if isinstance(self.logging, DotDict) else {}
        log_path = self.log_file_path()
        section["file"] = str(log_path) if log_path else None
        return LogConfig.from_dict(section)
