"""
Log formatter with structured field rendering.

Output layout (colors omitted):

    [2026-01-05 12:34:56,789] [I] command completed (exit 0)   [cmd:0] [4242] [/svc]
"""

import collections
import logging
from typing import Any

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Return the structured fields attached by Logger, in display order."""
    extra = getattr(record, "__cmdsvc__extra", None)
    if not extra:
        return {}
    if isinstance(extra, collections.OrderedDict):
        return dict(extra)
    return {key: extra[key] for key in sorted(extra)}


def _render_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class PreFormatter(logging.Formatter):
    """Formatter that optionally adds microseconds to timestamps."""

    def __init__(self, fmt: str, micros: bool) -> None:
        self._micros = micros
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, datefmt)
        if self._micros:
            micros = int((record.created % 1) * 1000000) % 1000
            s += f".{micros:03d}"
        return s


class LogFormatter(logging.Formatter):
    """
    Formatter producing aligned, optionally colored log lines.

    Structured fields passed through ``extra`` are rendered as ``[key:value]``
    after the message, padded to a fixed rule so fields line up, followed by
    the process id and the logger name.
    """

    def __init__(self, config: LogConfig) -> None:
        super().__init__()
        self._config = config
        self._pre_formatter = PreFormatter(LogConstants.DEFAULT_FORMAT, config.micros)

    @property
    def config(self) -> LogConfig:
        return self._config

    def format(self, record: logging.LogRecord) -> str:
        width = self._calculate_width(record)
        if self._config.colors:
            fmt = self._colored_format(record, width)
        else:
            fmt = self._plain_format(record, width)

        self._pre_formatter._style._fmt = fmt
        return self._pre_formatter.format(record)

    def _calculate_width(self, record: logging.LogRecord) -> int:
        """Display width of "[time] [L] message" without formatting it."""
        # "YYYY-MM-DD HH:MM:SS,mmm" plus ".uuu" with micros
        timestamp_len = 27 if self._config.micros else 23
        return 1 + timestamp_len + 4 + 1 + 2 + len(record.getMessage())

    def _padding(self, width: int) -> str:
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        return " " * max(1, rule - width)

    @staticmethod
    def _escape(text: str) -> str:
        # the result is used as a %-style format string
        return text.replace("%", "%%")

    def _plain_format(self, record: logging.LogRecord, width: int) -> str:
        fmt = LogConstants.DEFAULT_FORMAT + self._padding(width)
        fields = [
            f"[{key}:{self._escape(_render_value(value))}]"
            for key, value in _record_extra(record).items()
        ]
        if fields:
            fmt += " ".join(fields) + " "
        return fmt + "[%(process)d] [%(name)s]"

    def _colored_format(self, record: logging.LogRecord, width: int) -> str:
        col = ColorManager.get_color_for_level(record.levelno)
        bold = ColorManager.create_bold_color(col)
        col += "m"
        reset = ColorManager.RESET

        fmt = col + "[%(asctime)s] [" + bold + "%(levelname).1s" + reset + col + "] "
        fmt += bold + "%(message)s" + reset + col + self._padding(width)

        for key, value in _record_extra(record).items():
            fmt += f"{key}[{bold}{self._escape(_render_value(value))}{reset}{col}] "

        gray = ColorManager.create_gray_level(9)
        fmt += gray + "m[%(process)d] [%(name)s]" + reset
        return fmt
