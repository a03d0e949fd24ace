"""
Exceptions raised by the logging system.
"""

from typing import Any

from ..exceptions import CmdSvcError


class LogError(CmdSvcError):
    """Base exception for logging-related errors."""

    pass


class InvalidLogLevelError(LogError):
    """Raised when an invalid log level is specified."""

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")
