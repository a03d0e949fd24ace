"""
Shutdown manager for handling host stop signals.

Translates SIGTERM and SIGINT (and SIGBREAK on Windows) into a single
StopSignal fire. The handler only sets the signal; supervisors and the
fan-out do the actual shutdown work on their own threads.
"""

import signal
from typing import Any

from ..core.token import StopSignal
from ..log import Logger


def _shutdown_signals() -> list[signal.Signals]:
    signals = [signal.SIGTERM, signal.SIGINT]
    sigbreak = getattr(signal, "SIGBREAK", None)
    if sigbreak is not None:
        signals.append(sigbreak)
    return signals


class ShutdownManager:
    """
    Manages shutdown signal handling.

    Usage:
        stop = StopSignal()
        with ShutdownManager(stop, lg) as manager:
            result = service.run(stop)
        if manager.is_shutting_down():
            code = manager.get_signal_return_code()
    """

    def __init__(self, stop: StopSignal, lg: Logger | None = None) -> None:
        self._stop = stop
        self._lg = lg
        self._shutting_down = False
        self._signal_return_code: int = 130  # Default to SIGINT
        self._original_handlers: dict[signal.Signals, Any] = {}

    @property
    def stop(self) -> StopSignal:
        return self._stop

    def register_signal_handlers(self) -> None:
        """Register handlers for the shutdown signals (main thread only)."""
        for signum in _shutdown_signals():
            self._original_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore(self) -> None:
        """Reinstall the handlers that were active before registration."""
        for signum, handler in self._original_handlers.items():
            signal.signal(signum, handler)
        self._original_handlers.clear()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        """
        Handle a shutdown signal by firing the stop signal.

        Args:
            signum: Signal number (SIGINT=2, SIGTERM=15)
            frame: Current stack frame (unused)
        """
        if self._shutting_down:
            return  # Ignore duplicate signals

        self._shutting_down = True
        self._signal_return_code = 143 if signum == signal.SIGTERM else 130
        name = signal.Signals(signum).name
        if self._lg is not None:
            self._lg.info("shutdown requested", extra={"signal": name})
        self._stop.fire(reason=name)

    def is_shutting_down(self) -> bool:
        """Check if shutdown is in progress."""
        return self._shutting_down

    def get_signal_return_code(self) -> int:
        """
        Get the return code for the signal that triggered shutdown.

        Returns:
            130 for SIGINT (Ctrl+C), 143 for SIGTERM, or 130 as default.
        """
        return self._signal_return_code

    def __enter__(self) -> "ShutdownManager":
        self.register_signal_handlers()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.restore()
