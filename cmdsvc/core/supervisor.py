"""
Per-command supervision.

A CommandSupervisor owns one subprocess for its whole life: it spawns the
command through the shell, races the process's natural exit against its
cancellation token, kills the process if cancellation wins and reports a
single Outcome.
"""

from __future__ import annotations

import enum
import logging
import signal
import subprocess
import sys
import threading
from collections.abc import Callable, Sequence
from concurrent import futures
from typing import Any

from ..exceptions import CmdSvcError, SpawnError, TerminationError, WaitError
from ..log import Logger, LoggerFactory, log_exception_chain
from .outcome import ExitStatus, Outcome
from .shell import build_argv
from .token import CancellationToken

PopenFactory = Callable[..., Any]

# Popen.kill() on Windows is TerminateProcess(handle, 1)
WINDOWS_KILL_CODE = 1


class SupervisorState(enum.Enum):
    """Lifecycle state of a supervisor."""

    NOT_STARTED = "not_started"
    SPAWNING = "spawning"
    RACING = "racing"
    TERMINATING = "terminating"
    DONE = "done"


def is_kill_status(status: ExitStatus) -> bool:
    """
    Whether an exit status is the one Popen.kill() produces.

    A process that exits on its own between cancellation and the kill keeps
    its own status; the kill is then a no-op on an already exited process.
    """
    if sys.platform == "win32":
        return status.code == WINDOWS_KILL_CODE
    return status.signal == signal.SIGKILL


class CommandSupervisor:
    """
    Supervise one command from spawn to outcome.

    The race between exit and cancellation runs on the shared waiter pool:
    one future blocks in ``Popen.wait()``, the other polls the token. The
    cancellation waiter gives up once the race is settled, so the pool
    thread is released even when the process wins.

    run() never raises for problems with the command itself; spawn, wait
    and kill failures are reported through the returned Outcome.

    Example:
        sup = CommandSupervisor(0, "sleep 30", fanout.token(0), waiter_pool, lg)
        outcome = supervisor_pool.submit(sup.run).result()
    """

    def __init__(
        self,
        index: int,
        command: str,
        token: CancellationToken,
        pool: futures.Executor,
        lg: Logger,
        shell: Sequence[str] | None = None,
        poll_interval: float = 0.1,
        kill_timeout: float = 10.0,
        popen: PopenFactory = subprocess.Popen,
    ) -> None:
        """
        Initialize the supervisor.

        Args:
            index: Command index, the identity of the command
            command: Raw command line
            token: Cancellation token fired by the fan-out
            pool: Executor running the completion and cancellation waiters
            lg: Parent logger; a "/cmd/<index>" logger is derived from it
            shell: Shell argv prefix (platform default if None)
            poll_interval: Seconds between cancellation token checks
            kill_timeout: Seconds to wait for the exit status after a kill
            popen: Process factory, subprocess.Popen by default
        """
        self._index = index
        self._command = command
        self._token = token
        self._pool = pool
        self._lg = LoggerFactory.derive(lg, ["cmd", str(index)], extra={"cmd": index})
        self._shell = shell
        self._poll_interval = poll_interval
        self._kill_timeout = kill_timeout
        self._popen = popen

        self._state = SupervisorState.NOT_STARTED
        self._proc: Any = None
        self._outcome: Outcome | None = None
        self._settled = threading.Event()

    @property
    def index(self) -> int:
        return self._index

    @property
    def command(self) -> str:
        return self._command

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def pid(self) -> int | None:
        """Process id, None until the command is spawned."""
        return self._proc.pid if self._proc is not None else None

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    def run(self) -> Outcome:
        """
        Supervise the command until it is done.

        Returns:
            The command's outcome
        """
        try:
            outcome = self._supervise()
        finally:
            self._settled.set()
        self._outcome = outcome
        self._state = SupervisorState.DONE
        return outcome

    def _supervise(self) -> Outcome:
        if self._token.fired:
            self._lg.info("cancelled before spawn")
            return Outcome.terminated(self._index, self._command)

        self._state = SupervisorState.SPAWNING
        try:
            self._proc = self._spawn()
        except SpawnError as e:
            log_exception_chain(self._lg, e)
            return Outcome.spawn_failed(self._index, self._command, e)
        self._lg.info("started command", extra={"pid": self._proc.pid})
        self._lg.debug("command line", extra={"command": self._command})

        self._state = SupervisorState.RACING
        exit_fut = self._pool.submit(self._wait_for_exit, self._proc)
        cancel_fut = self._pool.submit(self._wait_for_cancel)
        futures.wait([exit_fut, cancel_fut], return_when=futures.FIRST_COMPLETED)

        # a natural exit wins ties
        if exit_fut.done():
            return self._collect(exit_fut)
        return self._terminate(exit_fut)

    def _spawn(self) -> Any:
        argv = build_argv(self._command, self._shell)
        try:
            return self._popen(argv)
        except (OSError, ValueError) as e:
            raise SpawnError("failed to spawn command", shell=argv[0]) from e

    def _wait_for_exit(self, proc: Any) -> ExitStatus:
        try:
            returncode = proc.wait()
        except Exception as e:
            raise WaitError("failed to wait for command", pid=proc.pid) from e
        return ExitStatus.from_returncode(returncode)

    def _wait_for_cancel(self) -> bool:
        while not self._token.wait(self._poll_interval):
            if self._settled.is_set():
                return False
        return True

    def _collect(self, exit_fut: futures.Future) -> Outcome:
        try:
            status = exit_fut.result()
        except WaitError as e:
            log_exception_chain(self._lg, e)
            return Outcome.wait_failed(self._index, self._command, e, self.pid)
        return Outcome.completed(self._index, self._command, status, self.pid)

    def _terminate(self, exit_fut: futures.Future) -> Outcome:
        self._state = SupervisorState.TERMINATING
        self._lg.info("cancellation observed", extra={"pid": self.pid})

        # poll() reports None while the completion waiter holds the wait lock
        if exit_fut.done():
            self._lg.debug("command exited before kill")
            return self._collect(exit_fut)

        kill_error = self._kill()
        try:
            status = exit_fut.result(timeout=self._kill_timeout)
        except futures.TimeoutError:
            error: CmdSvcError = TerminationError(
                "command still running after kill",
                pid=self.pid,
                timeout=self._kill_timeout,
            )
            if kill_error is not None:
                error.caused_by(kill_error)
            log_exception_chain(self._lg, error)
            return Outcome.wait_failed(self._index, self._command, error, self.pid)
        except WaitError as e:
            log_exception_chain(self._lg, e)
            return Outcome.wait_failed(self._index, self._command, e, self.pid)

        if kill_error is not None or not is_kill_status(status):
            # the process exited on its own before the kill reached it
            self._lg.debug("command exited before kill", extra={"status": status})
            return Outcome.completed(self._index, self._command, status, self.pid)
        return Outcome.terminated(self._index, self._command, status, self.pid)

    def _kill(self) -> TerminationError | None:
        try:
            self._proc.kill()
        except OSError as e:
            error = TerminationError("failed to kill command", pid=self.pid)
            error.caused_by(e)
            log_exception_chain(self._lg, error, level=logging.WARNING)
            return error
        self._lg.debug("sent kill", extra={"pid": self.pid})
        return None
