"""Execution engine: runs job slices and decides when to stop.

This module provides:
- IterationRunner: drives one slice, returns an IterationOutcome
- SliceLimits: time budget / iteration cap / shutdown flag stop conditions
- SliceDriver: in-process re-enqueue loop (host queue stand-in)
- Clock, SystemClock: time source for runtime budgets

Example:
    from resumer.engine import IterationRunner, SliceLimits

    runner = IterationRunner()
    outcome = runner.run(job, params, cursor, should_stop=SliceLimits(max_runtime_seconds=300))
"""

from resumer.engine.clock import DEFAULT_CLOCK, Clock, SystemClock
from resumer.engine.driver import DriveResult, SliceDriver
from resumer.engine.limits import ShouldStop, SliceLimits, shutdown_signal_context
from resumer.engine.runner import IterationRunner

__all__ = [
    "DEFAULT_CLOCK",
    "Clock",
    "DriveResult",
    "IterationRunner",
    "ShouldStop",
    "SliceDriver",
    "SliceLimits",
    "SystemClock",
    "shutdown_signal_context",
]
