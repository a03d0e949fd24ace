"""
Immutable logger configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .constants import LogConstants
from .exceptions import InvalidLogLevelError


def resolve_level(level: str | int | bool) -> int | bool:
    """
    Resolve log level from string, numeric value, or boolean.

    Args:
        level: Level name ("debug", "info", ...), numeric value, or False
            (or "false") to disable logging

    Returns:
        Numeric log level, or False when logging is disabled

    Raises:
        InvalidLogLevelError: If the log level is invalid
    """
    if isinstance(level, bool):
        return logging.INFO if level else False
    if isinstance(level, int):
        return level

    name = str(level).strip().lower()
    if name.isnumeric():
        return int(name)
    if name in LogConstants.LEVEL_NAMES:
        return LogConstants.LEVEL_NAMES[name]

    raise InvalidLogLevelError(level)


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for the root logger.

    Derived loggers share the root's handlers, so these settings apply to
    every logger of a service.
    """

    level: int | bool = logging.INFO  # False disables logging
    micros: bool = False
    colors: bool = True
    file: str | None = None

    @classmethod
    def from_params(
        cls,
        level: str | int | bool = "info",
        micros: bool = False,
        colors: bool = True,
        file: str | None = None,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (name, numeric value, or False to disable logging)
            micros: Whether to show microsecond precision
            colors: Whether to enable colored console output
            file: Optional log file path, or "auto"

        Returns:
            LogConfig instance
        """
        return cls(
            level=resolve_level(level),
            micros=bool(micros),
            colors=bool(colors),
            file=str(file) if file else None,
        )

    @classmethod
    def from_dict(cls, section: dict[str, Any] | None) -> LogConfig:
        """
        Create LogConfig from a 'logging' config section.

        Example:
            >>> LogConfig.from_dict({"level": "debug", "colors": False})
        """
        section = section or {}
        return cls.from_params(
            level=section.get("level", "info"),
            micros=section.get("micros", False),
            colors=section.get("colors", True),
            file=section.get("file"),
        )

    def with_overrides(self, **overrides: Any) -> LogConfig:
        """Return a copy with the non-None overrides applied."""
        values = {
            "level": self.level,
            "micros": self.micros,
            "colors": self.colors,
            "file": self.file,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return LogConfig.from_params(**values)
