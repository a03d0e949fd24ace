"""
Logging for the command service.

Extends Python's standard logging with:
- Structured extra fields rendered as ``[key:value]``
- Colored console output with ANSI escape sequences
- Optional microsecond precision timestamps
- Hierarchical "view" loggers sharing the root logger's handlers
- Complete logging disable (level=False or level="false")
"""

import logging
from typing import cast

from ..exceptions import format_cause_chain
from .config import LogConfig, resolve_level
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger


def create_root_lg(
    level: str | int | bool = "info",
    micros: bool = False,
    colors: bool = True,
    file: str | None = None,
) -> Logger:
    """
    Create a root logger with the specified configuration.

    Example:
        >>> lg = create_root_lg("debug", colors=False)
    """
    return LoggerFactory.create_root(LogConfig.from_params(level, micros, colors, file))


def derive_lg(lg: Logger, tags: str | list[str], **extra: object) -> Logger:
    """
    Derive a logger with tags (and bound extra fields) from a parent logger.

    Example:
        >>> cmd_lg = derive_lg(root_lg, ["cmd", "0"], cmd=0)
    """
    return LoggerFactory.derive(lg, tags, extra or None)


def log_exception_chain(
    lg: logging.Logger,
    exc: BaseException,
    level: int | str = logging.ERROR,
    extra: dict[str, object] | None = None,
) -> None:
    """
    Log an exception followed by one "- Caused by:" line per chained cause.

    Example:
        >>> log_exception_chain(lg, e)
        [2026-01-05 12:34:56,789] [E] Error: failed to load config (path=app.yaml)
        [2026-01-05 12:34:56,789] [E] - Caused by: [Errno 2] No such file or directory
    """
    levelno = resolve_level(level) if isinstance(level, str) else level
    for line in format_cause_chain(exc):
        lg.log(cast(int, levelno), line, extra=extra)


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "LogFormatter",
    "LogError",
    "InvalidLogLevelError",
    "resolve_level",
    "create_root_lg",
    "derive_lg",
    "log_exception_chain",
]
