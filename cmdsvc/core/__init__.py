"""
Command supervision core.

StopSignal -> CancellationFanout -> one CancellationToken per command ->
CommandSupervisor -> Outcome -> OutcomeAggregator -> AggregateResult.
"""

from .aggregator import OutcomeAggregator
from .fanout import CancellationFanout
from .outcome import (
    EXIT_FAILURE,
    EXIT_FATAL,
    EXIT_SUCCESS,
    AggregateResult,
    ExitStatus,
    Outcome,
    OutcomeKind,
)
from .shell import build_argv, default_shell
from .supervisor import CommandSupervisor, SupervisorState
from .token import CancellationToken, StopSignal

__all__ = [
    "AggregateResult",
    "CancellationFanout",
    "CancellationToken",
    "CommandSupervisor",
    "EXIT_FAILURE",
    "EXIT_FATAL",
    "EXIT_SUCCESS",
    "ExitStatus",
    "Outcome",
    "OutcomeAggregator",
    "OutcomeKind",
    "StopSignal",
    "SupervisorState",
    "build_argv",
    "default_shell",
]
