"""
Factory for creating and deriving loggers.

A service creates one root logger (named "/") that owns the console and
optional file handlers; every other logger is derived from it and writes
through the root's handlers.
"""

import logging
import sys
from pathlib import Path
from typing import Any, cast

from .config import LogConfig
from .constants import LogConstants
from .formatters import LogFormatter
from .logger import ExtraLike, Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(config: LogConfig, logger_class: type[Logger] = Logger) -> Logger:
        """
        Create the root logger with the specified configuration.

        Example:
            >>> config = LogConfig.from_params(level="info", colors=False)
            >>> lg = LoggerFactory.create_root(config)
            >>> lg.info("service started")
            [2026-01-05 12:34:56,789] [I] service started    [1234] [/]
        """
        return LoggerFactory.create("/", config, logger_class)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        logger_class: type[Logger] = Logger,
        extra: ExtraLike | None = None,
    ) -> Logger:
        """
        Create a logger with its own handlers.

        Returns the already registered logger when one exists under the name.

        Args:
            name: Logger name
            config: Logger configuration
            logger_class: Logger class to use
            extra: Pre-populated extra fields to include in all log records

        Returns:
            Configured logger instance
        """
        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        lg = logger_class(name, config, extra)
        if config.level is not False:
            lg.setLevel(config.level)
            lg.addHandler(LoggerFactory._console_handler(config))
            # "auto" is resolved against the config path by ServiceConfig
            if config.file and config.file != LogConstants.AUTO_FILE:
                lg.addHandler(LoggerFactory._file_handler(config, config.file))
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return existing
        return None

    @staticmethod
    def _console_handler(config: LogConfig) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cast(int, config.level))
        handler.setFormatter(LogFormatter(config))
        return handler

    @staticmethod
    def _file_handler(config: LogConfig, filename: str) -> logging.Handler:
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setLevel(cast(int, config.level))
        # ANSI colors only make sense on a terminal
        plain = LogConfig(config.level, config.micros, colors=False)
        handler.setFormatter(LogFormatter(plain))
        return handler

    @staticmethod
    def derive(
        parent: Logger, tags: str | list[str], extra: dict[str, Any] | None = None
    ) -> Logger:
        """
        Derive a "view" logger that writes through the root's handlers.

        Examples:
            >>> root = LoggerFactory.create_root(config)  # name: "/"
            >>> LoggerFactory.derive(root, "service").name
            '/service'
            >>> LoggerFactory.derive(root, ["cmd", "3"], extra={"cmd": 3}).name
            '/cmd/3'

        Args:
            parent: Parent logger instance
            tags: Single tag or list of tags forming the hierarchy
            extra: Extra fields bound to the derived logger, merged over the
                parent's bound fields

        Returns:
            Derived logger instance
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(str(tag) for tag in tags)

        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        root = parent._root_logger or parent
        bound = dict(parent.extra)
        bound.update(extra or {})

        lg = parent.__class__(name, parent.config, bound)
        lg.setLevel(logging.NOTSET)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False

        logging.root.manager.loggerDict[name] = lg
        return lg
