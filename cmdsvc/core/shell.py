"""
Shell indirection for configured command lines.

Commands are handed to the platform shell verbatim; no quoting, escaping or
splitting is applied beyond what the shell itself does.
"""

import sys
from collections.abc import Sequence

POSIX_SHELL = ("sh", "-c")
WINDOWS_SHELL = ("cmd", "/C")


def default_shell() -> list[str]:
    """Return the argv prefix of the platform command shell."""
    if sys.platform == "win32":
        return list(WINDOWS_SHELL)
    return list(POSIX_SHELL)


def build_argv(command: str, shell: Sequence[str] | None = None) -> list[str]:
    """
    Build the argv that runs a command line through the shell.

    Args:
        command: Raw command line, passed as a single argument
        shell: Shell argv prefix (platform default if None)

    Returns:
        Argument vector for subprocess.Popen

    Example:
        >>> build_argv("echo hi && exit 3", ["sh", "-c"])
        ['sh', '-c', 'echo hi && exit 3']
    """
    prefix = list(shell) if shell is not None else default_shell()
    return prefix + [command]
