# src/resumer/engine/clock.py
"""Time source for slice budgets.

SliceLimits and IterationRunner read elapsed time through a Clock so tests
can drive a runtime budget without sleeping. SystemClock is the default.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything with a monotonic() returning seconds that never go backwards."""

    def monotonic(self) -> float: ...


class SystemClock:
    """time.monotonic(): immune to wall-clock adjustments mid-slice."""

    def monotonic(self) -> float:
        return time.monotonic()


DEFAULT_CLOCK: Clock = SystemClock()
