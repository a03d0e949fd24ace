"""
Command service wiring.

CommandService connects the configured commands, the stop signal, the
cancellation fan-out, one supervisor per command and the aggregator.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from .core import (
    EXIT_FATAL,
    AggregateResult,
    CancellationFanout,
    CommandSupervisor,
    OutcomeAggregator,
    StopSignal,
)
from .core.shell import default_shell
from .core.supervisor import PopenFactory
from .exceptions import StopSignalError
from .log import Logger, LoggerFactory

if TYPE_CHECKING:
    from .config import ServiceConfig


def abort_process(error: StopSignalError) -> None:
    """Flush logging and exit immediately; no further shutdown is possible."""
    logging.shutdown()
    os._exit(EXIT_FATAL)


class CommandService:
    """
    Run every configured command until it exits or the stop signal fires.

    Pools:
        - waiter pool with 2N+1 threads: one completion waiter and one
          cancellation waiter per command, plus the fan-out
        - supervisor pool with N threads, so a supervisor blocked in its race
          never holds a waiter slot

    Example:
        stop = StopSignal()
        service = CommandService.from_config(config, lg)
        result = service.run(stop)
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        cmds: Sequence[str],
        lg: Logger,
        shell: Sequence[str] | None = None,
        poll_interval: float = 0.1,
        kill_timeout: float = 10.0,
        on_fatal: Callable[[StopSignalError], None] | None = abort_process,
        popen: PopenFactory = subprocess.Popen,
    ) -> None:
        """
        Initialize the service.

        Args:
            cmds: Command lines, one supervisor each
            lg: Root logger
            shell: Shell argv prefix (platform default if None)
            poll_interval: Seconds between stop signal and token checks
            kill_timeout: Seconds to wait for a killed process to be reaped
            on_fatal: Called when the stop signal cannot be observed
            popen: Process factory passed to every supervisor
        """
        self._cmds = tuple(cmds)
        self._root_lg = lg
        self._lg = LoggerFactory.derive(lg, "service")
        self._shell = list(shell) if shell is not None else default_shell()
        self._poll_interval = poll_interval
        self._kill_timeout = kill_timeout
        self._on_fatal = on_fatal
        self._popen = popen

    @classmethod
    def from_config(
        cls, config: ServiceConfig, lg: Logger, **kwargs: object
    ) -> CommandService:
        """Create a service from a loaded ServiceConfig."""
        return cls(
            config.cmds,
            lg,
            shell=config.shell,
            poll_interval=config.poll_interval,
            kill_timeout=config.kill_timeout,
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def cmds(self) -> tuple[str, ...]:
        return self._cmds

    def run(self, stop: StopSignal) -> AggregateResult:
        """
        Run all commands and wait for every outcome.

        Returns when each command has exited on its own or has been
        terminated after the stop signal fired.

        Args:
            stop: Stop signal shared with the host lifecycle

        Returns:
            Aggregate result of all commands
        """
        start = time.monotonic()
        count = len(self._cmds)
        self._lg.info("starting commands", extra={"count": count})

        waiter_pool = ThreadPoolExecutor(
            max_workers=2 * count + 1, thread_name_prefix="cmdsvc-wait"
        )
        supervisor_pool = ThreadPoolExecutor(
            max_workers=max(count, 1), thread_name_prefix="cmdsvc-cmd"
        )
        fanout = CancellationFanout(
            stop,
            count,
            LoggerFactory.derive(self._root_lg, "fanout"),
            on_fatal=self._on_fatal,
            poll_interval=self._poll_interval,
        )
        try:
            waiter_pool.submit(fanout.run)
            supervisors = [
                CommandSupervisor(
                    idx,
                    cmd,
                    fanout.token(idx),
                    waiter_pool,
                    self._root_lg,
                    shell=self._shell,
                    poll_interval=self._poll_interval,
                    kill_timeout=self._kill_timeout,
                    popen=self._popen,
                )
                for idx, cmd in enumerate(self._cmds)
            ]
            supervisor_futures = [supervisor_pool.submit(s.run) for s in supervisors]
            result = OutcomeAggregator(self._lg).await_all(supervisor_futures)
        finally:
            fanout.close()
            supervisor_pool.shutdown(wait=False)
            # a waiter blocked on an unkillable process must not hang shutdown
            waiter_pool.shutdown(wait=False)

        runtime = time.monotonic() - start
        self._lg.info(
            "program completed",
            extra={"runtime": f"{runtime:.3f}s", "exit": result.exit_code},
        )
        return result
