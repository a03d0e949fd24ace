"""
Outcome types reported by command supervisors.

Every configured command produces exactly one Outcome. The aggregator
combines them into an AggregateResult, which decides the process exit code.
"""

from __future__ import annotations

import enum
import signal as _signal
from dataclasses import dataclass, field

from ..exceptions import AggregationError, CmdSvcError

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
# Stop signal could not be observed (EX_SOFTWARE)
EXIT_FATAL = 70


class OutcomeKind(enum.Enum):
    """How a command's lifecycle ended."""

    COMPLETED = "completed"
    TERMINATED_BY_CANCELLATION = "terminated"
    SPAWN_FAILED = "spawn_failed"
    WAIT_FAILED = "wait_failed"

    @property
    def is_error(self) -> bool:
        """Whether this kind counts against the aggregate result."""
        return self in (OutcomeKind.SPAWN_FAILED, OutcomeKind.WAIT_FAILED)


@dataclass(frozen=True)
class ExitStatus:
    """
    Exit status as reported by the OS.

    Exactly one of ``code`` and ``signal`` is set. No mapping is applied: a
    non-zero code is still a normal completion.
    """

    code: int | None = None
    signal: int | None = None

    @classmethod
    def from_returncode(cls, returncode: int) -> ExitStatus:
        """Convert a Popen returncode (negative means killed by signal on POSIX)."""
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        return self.code == 0

    def __str__(self) -> str:
        if self.signal is not None:
            try:
                name = _signal.Signals(self.signal).name
            except ValueError:
                return f"signal {self.signal}"
            return f"signal {self.signal} ({name})"
        return f"exit {self.code}"


@dataclass(frozen=True)
class Outcome:
    """Final, immutable result of one supervisor."""

    index: int
    command: str
    kind: OutcomeKind
    exit_status: ExitStatus | None = None
    error: CmdSvcError | None = None
    pid: int | None = None

    @classmethod
    def completed(
        cls, index: int, command: str, status: ExitStatus, pid: int | None = None
    ) -> Outcome:
        return cls(index, command, OutcomeKind.COMPLETED, exit_status=status, pid=pid)

    @classmethod
    def terminated(
        cls,
        index: int,
        command: str,
        status: ExitStatus | None = None,
        pid: int | None = None,
    ) -> Outcome:
        """Terminated by cancellation; status and pid are None if never spawned."""
        return cls(
            index,
            command,
            OutcomeKind.TERMINATED_BY_CANCELLATION,
            exit_status=status,
            pid=pid,
        )

    @classmethod
    def spawn_failed(cls, index: int, command: str, error: CmdSvcError) -> Outcome:
        return cls(index, command, OutcomeKind.SPAWN_FAILED, error=error)

    @classmethod
    def wait_failed(
        cls, index: int, command: str, error: CmdSvcError, pid: int | None = None
    ) -> Outcome:
        return cls(index, command, OutcomeKind.WAIT_FAILED, error=error, pid=pid)

    @property
    def is_error(self) -> bool:
        return self.kind.is_error

    def describe(self) -> str:
        """Short human-readable description, e.g. "completed (exit 3)"."""
        if self.kind is OutcomeKind.COMPLETED:
            return f"completed ({self.exit_status})"
        if self.kind is OutcomeKind.TERMINATED_BY_CANCELLATION:
            if self.pid is None:
                return "cancelled before spawn"
            return f"terminated by cancellation ({self.exit_status})"
        return f"{self.kind.value}: {self.error}"


@dataclass(frozen=True)
class AggregateResult:
    """
    Combined result of all supervisors.

    Attributes:
        outcomes: Outcomes in command index order
        failures: Supervisors that could not be joined
    """

    outcomes: tuple[Outcome, ...] = ()
    failures: tuple[AggregationError, ...] = field(default=())

    @property
    def success(self) -> bool:
        """True when no outcome is an error and every supervisor was joined."""
        return not self.failures and not any(o.is_error for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.success else EXIT_FAILURE

    def outcome(self, index: int) -> Outcome | None:
        """Outcome of the command at index, None if its supervisor was lost."""
        for outcome in self.outcomes:
            if outcome.index == index:
                return outcome
        return None

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)
