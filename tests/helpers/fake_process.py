"""
Fake subprocess handles for supervisor tests.

FakeProcess mimics the part of subprocess.Popen a supervisor uses (pid,
returncode, wait, poll, kill) without starting anything. Like Popen, poll()
reports None while another thread is blocked in wait(), and kill() on a
process that already exited does nothing.
"""

import sys
import threading
from typing import Any

# returncode Popen reports after kill(): SIGKILL on POSIX, TerminateProcess on Windows
KILLED_RETURNCODE = 1 if sys.platform == "win32" else -9


class FakeProcess:
    """
    Controllable stand-in for subprocess.Popen.

    Example:
        proc = FakeProcess()
        popen = FakePopen(proc)
        threading.Timer(0.1, proc.finish, args=(3,)).start()
    """

    def __init__(
        self,
        pid: int = 4242,
        dies_on_kill: bool = True,
        kill_error: BaseException | None = None,
        wait_error: BaseException | None = None,
    ) -> None:
        self.pid = pid
        self.returncode: int | None = None
        self.dies_on_kill = dies_on_kill
        self.kill_error = kill_error
        self.wait_error = wait_error
        self.kill_calls = 0
        self._exit_code: int | None = None
        self._reaped = threading.Event()
        self._waiting = 0
        self._lock = threading.Lock()

    @property
    def waiting(self) -> bool:
        """Whether a thread is blocked in wait()."""
        with self._lock:
            return self._waiting > 0

    def finish(self, returncode: int = 0) -> None:
        """Let the process exit with returncode and be reaped."""
        self.exit_unreaped(returncode)
        self.release()

    def exit_unreaped(self, returncode: int = 0) -> None:
        """Exit without releasing a blocked wait() yet."""
        with self._lock:
            if self._exit_code is None:
                self._exit_code = returncode

    def release(self) -> None:
        """Reap the exited process, releasing any blocked wait()."""
        with self._lock:
            self.returncode = self._exit_code
        self._reaped.set()

    def wait(self, timeout: float | None = None) -> int | None:
        if self.wait_error is not None:
            raise self.wait_error
        with self._lock:
            self._waiting += 1
        try:
            self._reaped.wait(timeout)
        finally:
            with self._lock:
                self._waiting -= 1
        return self.returncode

    def poll(self) -> int | None:
        with self._lock:
            if self._waiting:
                # the blocked waiter owns reaping
                return None
            if self._exit_code is not None:
                self.returncode = self._exit_code
            return self.returncode

    def kill(self) -> None:
        self.kill_calls += 1
        if self.kill_error is not None:
            raise self.kill_error
        with self._lock:
            exited = self._exit_code is not None
        if exited:
            return
        if self.dies_on_kill:
            self.finish(KILLED_RETURNCODE)


class FakePopen:
    """Popen factory returning prepared FakeProcess objects in order."""

    def __init__(self, *procs: FakeProcess, error: BaseException | None = None):
        self._procs = list(procs)
        self._error = error
        self.calls: list[list[str]] = []

    def __call__(self, argv: list[str], **kwargs: Any) -> FakeProcess:
        self.calls.append(list(argv))
        if self._error is not None:
            raise self._error
        return self._procs.pop(0)
