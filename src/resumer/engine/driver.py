# src/resumer/engine/driver.py
"""SliceDriver: in-process stand-in for the host queue.

Runs slice after slice the way a queue re-delivers an interrupted job: a
fresh job instance per delivery, the same params, and the interruption cursor
passed through its wire form (cursor_dumps/cursor_loads). A cursor that would
not survive a real queue's argument serialization fails here too.

Used by the CLI's ``run --until-done`` and by tests that exercise resumption
across slice boundaries.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from resumer.contracts.enums import OutcomeStatus
from resumer.contracts.outcomes import IterationOutcome
from resumer.core.canonical import cursor_dumps, cursor_loads
from resumer.core.logging import get_logger
from resumer.engine.limits import ShouldStop, SliceLimits
from resumer.engine.runner import IterationRunner
from resumer.jobs.protocols import IterationJobProtocol

logger = get_logger(__name__)

StopFactory = Callable[[], "ShouldStop | SliceLimits | None"]


@dataclass
class DriveResult:
    """All outcomes of one drive, in slice order."""

    outcomes: list[IterationOutcome] = field(default_factory=list)

    @property
    def final(self) -> IterationOutcome:
        return self.outcomes[-1]

    @property
    def times_interrupted(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == OutcomeStatus.INTERRUPTED)

    @property
    def total_iterations(self) -> int:
        return sum(outcome.iterations for outcome in self.outcomes)


class SliceDriver:
    """Re-runs interrupted slices until the job completes or fails.

    Args:
        runner: Runner executing each slice
        stop_factory: Called once per slice for a fresh stop condition
        max_slices: Give up (returning the last INTERRUPTED outcome) after this many slices
    """

    def __init__(
        self,
        runner: IterationRunner | None = None,
        *,
        stop_factory: StopFactory | None = None,
        max_slices: int | None = None,
    ) -> None:
        if max_slices is not None and max_slices < 1:
            raise ValueError(f"max_slices must be positive, got {max_slices}")
        self._runner = runner if runner is not None else IterationRunner()
        self._stop_factory = stop_factory
        self._max_slices = max_slices

    def drive(self, job_factory: Callable[[], IterationJobProtocol], params: Any, cursor: Any = None) -> DriveResult:
        """Run slices of ``job_factory()`` starting from ``cursor``.

        Raises:
            CursorEncodeError: If an interruption cursor has no wire form
        """
        result = DriveResult()
        wire_cursor = None if cursor is None else cursor_dumps(cursor)
        while self._max_slices is None or len(result.outcomes) < self._max_slices:
            slice_cursor = None if wire_cursor is None else cursor_loads(wire_cursor)
            should_stop = self._stop_factory() if self._stop_factory is not None else None
            outcome = self._runner.run(job_factory(), params, slice_cursor, should_stop)
            result.outcomes.append(outcome)
            if outcome.status != OutcomeStatus.INTERRUPTED:
                break
            wire_cursor = cursor_dumps(outcome.cursor)
            logger.debug("re-enqueued", cursor=wire_cursor, slice=len(result.outcomes))
        return result
