"""
One-shot notification primitives.

StopSignal is the single shutdown request of a service: written once by the
host lifecycle and read by the cancellation fan-out. CancellationToken is
the per-command signal the fan-out fires and exactly one supervisor observes.
Both are idempotent: firing again is a no-op.
"""

import threading


class StopSignal:
    """
    Write-once, read-many shutdown request.

    A StopSignal is created by the host and passed by reference to the
    service; there is no process-wide instance.

    Example:
        stop = StopSignal()
        threading.Timer(5.0, stop.fire).start()
        stop.wait()  # returns after ~5s
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Reason given by the first fire() call."""
        return self._reason

    def fire(self, reason: str | None = None) -> bool:
        """
        Request shutdown.

        Args:
            reason: Optional description (e.g. the signal name)

        Returns:
            True if this call fired the signal, False if it was already fired
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until fired or timeout; returns whether the signal is fired."""
        return self._event.wait(timeout)


class CancellationToken:
    """One-shot cancellation signal for a single command supervisor."""

    def __init__(self, index: int) -> None:
        self._index = index
        self._event = threading.Event()
        self._lock = threading.Lock()

    @property
    def index(self) -> int:
        """Index of the command this token belongs to."""
        return self._index

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    def fire(self) -> bool:
        """Fire the token; returns False if it was already fired."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "fired" if self.fired else "pending"
        return f"CancellationToken(index={self._index}, {state})"
