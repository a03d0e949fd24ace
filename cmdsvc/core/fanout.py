"""
Cancellation fan-out.

Turns the single StopSignal into one CancellationToken per command.
"""

from __future__ import annotations

from collections.abc import Callable

from ..exceptions import StopSignalError
from ..log import Logger, log_exception_chain
from .token import CancellationToken, StopSignal


class CancellationFanout:
    """
    Observe the stop signal once and fire every command's token.

    The fan-out waits for the StopSignal (checking every ``poll_interval``
    seconds whether it was closed), then fires the tokens in index order and
    returns. A failure to observe the signal is fatal: it is logged and
    handed to ``on_fatal``.

    Example:
        fanout = CancellationFanout(stop, len(cmds), lg)
        pool.submit(fanout.run)
        token = fanout.token(0)
    """

    def __init__(
        self,
        stop: StopSignal,
        count: int,
        lg: Logger,
        on_fatal: Callable[[StopSignalError], None] | None = None,
        poll_interval: float = 0.1,
    ) -> None:
        """
        Initialize the fan-out.

        Args:
            stop: Stop signal to observe
            count: Number of commands (one token each)
            lg: Logger for fan-out events
            on_fatal: Called with the error when the stop signal cannot be
                observed; expected to abort the process
            poll_interval: Seconds between checks for close()
        """
        self._stop = stop
        self._lg = lg
        self._on_fatal = on_fatal
        self._poll_interval = poll_interval
        self._tokens = tuple(CancellationToken(idx) for idx in range(count))
        self._closed = False

    @property
    def tokens(self) -> tuple[CancellationToken, ...]:
        return self._tokens

    def token(self, index: int) -> CancellationToken:
        return self._tokens[index]

    def run(self) -> bool:
        """
        Wait for the stop signal and fire all tokens.

        Returns:
            True if the stop signal was observed, False if the fan-out was
            closed first

        Raises:
            StopSignalError: If waiting on the stop signal failed
        """
        try:
            observed = self._wait_for_stop()
        except StopSignalError as e:
            self._escalate(e)
            raise

        if not observed:
            self._lg.debug("fan-out closed without stop signal")
            return False

        self._lg.info("received stop signal", extra={"reason": self._stop.reason})
        self.fire_all()
        return True

    def close(self) -> None:
        """Release a fan-out still waiting once every supervisor is done."""
        self._closed = True

    def fire_all(self) -> int:
        """
        Fire every token in index order.

        Tokens already fired are skipped silently.

        Returns:
            Number of tokens fired by this call
        """
        fired = 0
        for token in self._tokens:
            if token.fire():
                fired += 1
                self._lg.debug("fired cancellation token", extra={"cmd": token.index})
        return fired

    def _wait_for_stop(self) -> bool:
        try:
            while not self._stop.wait(self._poll_interval):
                if self._closed:
                    return False
        except Exception as e:
            raise StopSignalError("unable to observe stop signal") from e
        return True

    def _escalate(self, error: StopSignalError) -> None:
        log_exception_chain(self._lg, error, level="critical")
        if self._on_fatal is not None:
            self._on_fatal(error)
