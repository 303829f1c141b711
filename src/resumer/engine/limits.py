# src/resumer/engine/limits.py
"""Stop conditions for an execution slice.

The runner polls a ``ShouldStop`` predicate after every completed iteration.
SliceLimits builds one from the usual interruption sources, OR-combined
(first to fire wins):
- max_runtime_seconds: wall-time budget measured on an injectable Clock
- max_iterations: number of completed iterations in this slice
- shutdown: a threading.Event set by a signal handler or the host
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from resumer.contracts.enums import StopReason
from resumer.engine.clock import DEFAULT_CLOCK

if TYPE_CHECKING:
    from resumer.core.config import SliceSettings
    from resumer.engine.clock import Clock

ShouldStop = Callable[[], bool]


class SliceLimits:
    """Builds ShouldStop predicates and remembers which limit fired.

    Example:
        limits = SliceLimits(max_runtime_seconds=300, shutdown_event=event)
        outcome = runner.run(job, params, cursor, should_stop=limits.start())
        limits.triggered  # StopReason.MAX_RUNTIME, SHUTDOWN, ... or None
    """

    def __init__(
        self,
        *,
        max_runtime_seconds: float | None = None,
        max_iterations: int | None = None,
        shutdown_event: threading.Event | None = None,
        clock: Clock | None = None,
    ) -> None:
        if max_runtime_seconds is not None and max_runtime_seconds <= 0:
            raise ValueError(f"max_runtime_seconds must be positive, got {max_runtime_seconds}")
        if max_iterations is not None and max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.max_runtime_seconds = max_runtime_seconds
        self.max_iterations = max_iterations
        self.shutdown_event = shutdown_event
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._started_at: float | None = None
        self._iterations = 0
        self.triggered: StopReason | None = None

    @classmethod
    def from_settings(
        cls,
        settings: SliceSettings,
        *,
        shutdown_event: threading.Event | None = None,
        clock: Clock | None = None,
    ) -> SliceLimits:
        return cls(
            max_runtime_seconds=settings.max_runtime_seconds,
            max_iterations=settings.max_iterations,
            shutdown_event=shutdown_event,
            clock=clock,
        )

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock.monotonic() - self._started_at

    def start(self) -> ShouldStop:
        """Reset counters and return the predicate for a new slice."""
        self._started_at = self._clock.monotonic()
        self._iterations = 0
        self.triggered = None
        return self.should_stop

    def should_stop(self) -> bool:
        """Count one completed iteration and evaluate every limit."""
        if self._started_at is None:
            self._started_at = self._clock.monotonic()
        self._iterations += 1
        # Shutdown wins over budgets: it is the reason the host cares about
        if self.shutdown_event is not None and self.shutdown_event.is_set():
            self.triggered = StopReason.SHUTDOWN
        elif self.max_iterations is not None and self._iterations >= self.max_iterations:
            self.triggered = StopReason.MAX_ITERATIONS
        elif self.max_runtime_seconds is not None and self.elapsed_seconds >= self.max_runtime_seconds:
            self.triggered = StopReason.MAX_RUNTIME
        return self.triggered is not None


@contextmanager
def shutdown_signal_context() -> Iterator[threading.Event]:
    """Install SIGINT/SIGTERM handlers that set a shutdown event.

    On first signal: sets the event, restores default SIGINT handler
    (so a second Ctrl-C force-kills via KeyboardInterrupt).

    Outside the main thread signal registration is skipped (signal.signal()
    raises ValueError there); the yielded Event still works, it just won't be
    set by OS signals. Original handlers are restored on exit.
    """
    shutdown_event = threading.Event()

    if threading.current_thread() is not threading.main_thread():
        yield shutdown_event
        return

    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)

    def _handler(signum: int, frame: Any) -> None:
        shutdown_event.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    try:
        yield shutdown_event
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
