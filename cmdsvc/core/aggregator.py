"""
Outcome aggregation.

Joins every supervisor, logs each outcome as it arrives and decides the
overall result.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent import futures

from ..exceptions import AggregationError
from ..log import Logger, log_exception_chain
from .outcome import AggregateResult, Outcome, OutcomeKind


class OutcomeAggregator:
    """
    Wait for all supervisor futures and build the AggregateResult.

    Futures are consumed in completion order; the result lists outcomes in
    command index order. A future that raised (or was cancelled) is recorded
    as an AggregationError for its index instead of aborting aggregation.
    """

    def __init__(self, lg: Logger) -> None:
        self._lg = lg

    def await_all(
        self, supervisor_futures: Sequence[futures.Future]
    ) -> AggregateResult:
        """
        Wait for all supervisors.

        Args:
            supervisor_futures: One future per command, indexed by command
                index, each resolving to an Outcome

        Returns:
            Aggregate result of all commands
        """
        if not supervisor_futures:
            self._lg.info("no commands configured")
            return AggregateResult()

        index_of = {fut: idx for idx, fut in enumerate(supervisor_futures)}
        outcomes: list[Outcome] = []
        failures: list[AggregationError] = []

        for fut in futures.as_completed(supervisor_futures):
            idx = index_of[fut]
            try:
                outcome = fut.result()
            except Exception as e:
                error = AggregationError("failed to join supervisor", cmd=idx)
                error.caused_by(e)
                log_exception_chain(self._lg, error, extra={"cmd": idx})
                failures.append(error)
                continue
            self._log_outcome(outcome)
            outcomes.append(outcome)

        outcomes.sort(key=lambda o: o.index)
        result = AggregateResult(tuple(outcomes), tuple(failures))
        self._log_summary(result)
        return result

    def _log_outcome(self, outcome: Outcome) -> None:
        extra = {"cmd": outcome.index}
        if outcome.is_error:
            self._lg.error(f"command {outcome.describe()}", extra=extra)
        else:
            self._lg.info(f"command {outcome.describe()}", extra=extra)

    def _log_summary(self, result: AggregateResult) -> None:
        extra = {
            "completed": result.count(OutcomeKind.COMPLETED),
            "terminated": result.count(OutcomeKind.TERMINATED_BY_CANCELLATION),
            "failed": sum(1 for o in result.outcomes if o.is_error)
            + len(result.failures),
        }
        if result.success:
            self._lg.info("all commands finished", extra=extra)
        else:
            self._lg.warning("commands finished with errors", extra=extra)
