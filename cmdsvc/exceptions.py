"""
Exception hierarchy for the command service.

Every error raised by cmdsvc derives from CmdSvcError, so callers can catch
all service failures with a single except clause. Per-command errors are not
raised out of a supervisor; they are carried inside that command's Outcome.
"""

from typing import Any


class CmdSvcError(Exception):
    """
    Base exception for all command service errors.

    Example:
        try:
            service.run(stop)
        except CmdSvcError as e:
            lg.error(f"service error: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def caused_by(self, cause: BaseException) -> "CmdSvcError":
        """Chain an underlying exception without raising, returns self."""
        self.__cause__ = cause
        return self


class ConfigError(CmdSvcError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found
        - Invalid YAML or TOML syntax
        - Missing or malformed 'cmds' list
    """

    pass


class SpawnError(CmdSvcError):
    """The OS process for a command could not be created."""

    pass


class WaitError(CmdSvcError):
    """The exit status of a command could not be retrieved."""

    pass


class TerminationError(CmdSvcError):
    """
    A kill request was rejected or had no effect.

    Logged by the supervisor and never fatal to it.
    """

    pass


class AggregationError(CmdSvcError):
    """A supervisor's execution unit could not be joined."""

    pass


class StopSignalError(CmdSvcError):
    """
    Observing the stop signal failed.

    This removes the only shutdown path, so it is fatal to the whole process.
    """

    pass


def iter_causes(exc: BaseException) -> list[BaseException]:
    """Return exc followed by every exception chained behind it."""
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain


def format_cause_chain(exc: BaseException) -> list[str]:
    """
    Render an exception and its causes as log lines.

    The first line is "Error: <exc>", each chained cause adds a
    "- Caused by: <cause>" line.

    Args:
        exc: Exception to render

    Returns:
        List of lines, outermost exception first
    """
    chain = iter_causes(exc)
    lines = [f"Error: {chain[0]}"]
    lines.extend(f"- Caused by: {cause}" for cause in chain[1:])
    return lines
