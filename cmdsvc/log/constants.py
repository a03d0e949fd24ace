"""
Constants for the logging system.

Format strings, rule widths and level names shared by the config,
formatter and factory modules.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"

    # Column at which structured fields start
    DEFAULT_RULE_WIDTH: int = 80
    MICRO_RULE_WIDTH: int = 84

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "false": False,  # disables all logging
    }

    # Special value for LogConfig.file: derive the log path from the config path
    AUTO_FILE: str = "auto"

    RESET: str = "\x1b[0m"
    GRAY_BASE: int = 232
    GRAY_MAX_LEVELS: int = 24
