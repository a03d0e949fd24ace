"""Host process lifecycle."""

from .shutdown import ShutdownManager

__all__ = ["ShutdownManager"]
