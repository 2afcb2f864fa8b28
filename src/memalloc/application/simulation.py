# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""SimulationService: replays a request stream against a fresh allocator.

Architecture layer: application service.
No file or terminal I/O - request sources and report rendering live in
adapters.
"""

from collections.abc import Iterable

import structlog

from memalloc.domain.services import FirstFitAllocator
from memalloc.domain.value_objects import (
    AllocationFailed,
    AllocationSucceeded,
    Outcome,
    ReleaseFailed,
    ReleaseSucceeded,
    Request,
    RequestScript,
    SimulationReport,
)

logger = structlog.get_logger(__name__)


class SimulationService:
    """Runs one simulation per call.

    Each run owns its own FirstFitAllocator, so runs never share ledger
    or counter state.

    Args:
        check_invariants: Verify ledger invariants after every request
            (raises LedgerInvariantError on the first violation).
    """

    def __init__(self, check_invariants: bool = False) -> None:
        self._check_invariants = check_invariants

    def run(self, total_memory: int, requests: Iterable[Request]) -> SimulationReport:
        """Process `requests` in order over `total_memory` units.

        Raises:
            LedgerConfigurationError: If total_memory <= 0.
            LedgerInvariantError: If invariant checking is enabled and fails.
        """
        allocator = FirstFitAllocator(total_memory)
        log = logger.bind(total_memory=total_memory)
        log.info("simulation_started", check_invariants=self._check_invariants)

        events: list[Outcome] = []
        for step, request in enumerate(requests, start=1):
            outcome = allocator.process(request)
            events.append(outcome)
            _log_outcome(log.bind(step=step), outcome)
            if self._check_invariants:
                allocator.check_invariants()

        statistics = allocator.statistics()
        log.info(
            "simulation_finished",
            requests=len(events),
            successful_allocations=statistics.successful_allocations,
            failed_allocations=statistics.failed_allocations,
            fragmentation_pct=round(statistics.external_fragmentation_pct, 2),
        )

        return SimulationReport(
            total_memory=total_memory,
            events=tuple(events),
            memory_map=allocator.memory_map(),
            statistics=statistics,
        )

    def run_script(self, script: RequestScript) -> SimulationReport:
        return self.run(script.total_memory, script.requests)


def _log_outcome(log, outcome: Outcome) -> None:
    if isinstance(outcome, AllocationSucceeded):
        log.info(
            "allocation_succeeded",
            owner=outcome.owner,
            size=outcome.size,
            start=outcome.start,
            end=outcome.end,
        )
    elif isinstance(outcome, AllocationFailed):
        log.warning(
            "allocation_failed",
            owner=outcome.owner,
            size=outcome.size,
            reason=outcome.reason.value,
        )
    elif isinstance(outcome, ReleaseSucceeded):
        log.info("release_succeeded", owner=outcome.owner, start=outcome.start, size=outcome.size)
    elif isinstance(outcome, ReleaseFailed):
        log.warning("release_failed", owner=outcome.owner, reason=outcome.reason.value)
