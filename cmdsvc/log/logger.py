"""
Logger class with structured extra fields and shared root handlers.
"""

import collections
import logging
from typing import Any

from .config import LogConfig

ExtraLike = dict[str, Any] | collections.OrderedDict


class Logger(logging.Logger):
    """
    Logger with pre-bound extra fields and root handler delegation.

    Extends the standard Python logger with:
    - Pre-populated extra fields merged into every record (e.g. ``cmd`` index)
    - Structured fields kept on the record for LogFormatter
    - Derived "view" loggers that write through the root logger's handlers
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: ExtraLike | None = None,
    ) -> None:
        """
        Initialize the logger.

        Args:
            name: Logger name
            config: Logger configuration, default LogConfig if None
            extra: Pre-populated extra fields to include in all log records
        """
        if config is None:
            config = LogConfig()

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra: ExtraLike = extra or {}
        self._root_logger: Logger | None = None  # set for derived view loggers

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def extra(self) -> ExtraLike:
        """Extra fields bound to this logger."""
        return self._extra

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def _merge_extra(self, extra: ExtraLike | None) -> ExtraLike:
        merged: ExtraLike
        if isinstance(self._extra, collections.OrderedDict) or isinstance(
            extra, collections.OrderedDict
        ):
            merged = collections.OrderedDict(self._extra)
        else:
            merged = dict(self._extra)
        if extra:
            merged.update(extra)
        return merged

    def makeRecord(
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: ExtraLike | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create a log record carrying the merged structured fields."""
        merged = self._merge_extra(extra)
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func, None, sinfo
        )
        setattr(record, "__cmdsvc__extra", merged)
        # Keep standard attribute access for third-party formatters
        for key, value in merged.items():
            if key not in record.__dict__:
                record.__dict__[key] = value
        return record

    def callHandlers(self, record: logging.LogRecord) -> None:
        """Write through the root logger's handlers for derived loggers."""
        if self._root_logger is not None:
            for handler in self._root_logger.handlers:
                if record.levelno >= handler.level:
                    handler.handle(record)
        else:
            super().callHandlers(record)
