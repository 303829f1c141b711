# src/resumer/engine/runner.py
"""IterationRunner: drives one execution slice of a job.

Algorithm per slice:
1. Ensure the job type satisfies the job contract (validated once, cached)
2. build_enumerator(params, cursor=cursor) -> lazy (item, cursor) sequence
3. For each pair: each_iteration(item, params), then enforce the cursor policy
   and record the cursor as the resumption point
4. Poll should_stop() after every completed iteration; when it returns True
   stop immediately (no further item is pulled) -> INTERRUPTED(cursor)
5. Sequence exhausted -> COMPLETED

An error from each_iteration, or from pulling the next item, ends the slice as
FAILED carrying the last RECORDED cursor: the failing item was never recorded,
so the next slice processes it again (at-least-once per item).

Single-threaded and synchronous: each item is processed to completion before
the next is pulled.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from resumer.contracts.enums import StopReason
from resumer.contracts.errors import ArgumentError, JobContractError
from resumer.contracts.outcomes import IterationOutcome
from resumer.core.cursor import CursorPolicy
from resumer.core.logging import get_logger
from resumer.engine.clock import DEFAULT_CLOCK
from resumer.engine.limits import SliceLimits
from resumer.jobs.registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from resumer.contracts.job import JobSpec
    from resumer.core.cursor import DeprecationState
    from resumer.engine.clock import Clock
    from resumer.engine.limits import ShouldStop
    from resumer.jobs.protocols import IterationJobProtocol
    from resumer.jobs.registry import JobRegistry

logger = get_logger(__name__)


def _never_stop() -> bool:
    return False


class IterationRunner:
    """Runs execution slices.

    Holds no per-job state: one runner may drive any number of jobs, one
    slice at a time.

    Example:
        runner = IterationRunner(deprecation=DeprecationState(mode=DeprecationMode.RAISE))
        outcome = runner.run(job, params, cursor, should_stop=SliceLimits(max_runtime_seconds=300))
        if outcome.should_reenqueue:
            queue.enqueue(type(job), params, cursor=outcome.cursor)
    """

    def __init__(
        self,
        *,
        registry: JobRegistry | None = None,
        policy: CursorPolicy | None = None,
        deprecation: DeprecationState | None = None,
        clock: Clock | None = None,
    ) -> None:
        if policy is not None and deprecation is not None:
            raise ValueError("Pass either policy or deprecation, not both")
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._policy = policy if policy is not None else CursorPolicy(deprecation)
        self._clock = clock if clock is not None else DEFAULT_CLOCK

    @property
    def policy(self) -> CursorPolicy:
        return self._policy

    def run(
        self,
        job: IterationJobProtocol,
        params: Any,
        cursor: Any = None,
        should_stop: ShouldStop | SliceLimits | None = None,
    ) -> IterationOutcome:
        """Run one slice.

        Args:
            job: Job instance whose type satisfies the job contract
            params: Job parameters, passed through to both operations
            cursor: Resumption cursor, or None on the first slice
            should_stop: Predicate polled after each iteration, or SliceLimits

        Returns:
            IterationOutcome (COMPLETED, INTERRUPTED or FAILED)

        Raises:
            JobContractError: If the job type violates the contract, or
                build_enumerator returns something that is not a pair sequence
            CursorShapeError: If the starting cursor does not fit the source
            CursorSerializationError: If a non-primitive cursor is produced
                after the enforcement horizon
        """
        spec = self._registry.ensure(type(job))
        log = logger.bind(job=spec.name)
        started_at = self._clock.monotonic()

        limits: SliceLimits | None = None
        if isinstance(should_stop, SliceLimits):
            limits = should_stop
            predicate = limits.start()
        else:
            predicate = should_stop if should_stop is not None else _never_stop

        if cursor is None:
            _call_hook(job, "on_start", params)
        else:
            _call_hook(job, "on_resume", params, cursor)
        log.info("iteration slice started", cursor=cursor)

        enumerator = job.build_enumerator(params, cursor=cursor)
        if enumerator is None:
            log.info("build_enumerator returned None, nothing to iterate")
            _call_hook(job, "on_complete", params)
            return IterationOutcome.completed(elapsed_seconds=self._elapsed(started_at))
        try:
            iterator = iter(enumerator)
        except TypeError:
            raise JobContractError(
                spec.name,
                "build_enumerator",
                f"must return an iterable of (item, cursor) pairs, got {type(enumerator).__name__}",
            ) from None

        recorded = cursor
        iterations = 0
        try:
            while True:
                try:
                    pair = next(iterator)
                except StopIteration:
                    break
                except ArgumentError:
                    raise
                except Exception as e:
                    log.error("pulling next item failed", cursor=recorded, error=str(e), error_type=type(e).__name__)
                    return IterationOutcome.failed(
                        e, cursor=recorded, iterations=iterations, elapsed_seconds=self._elapsed(started_at)
                    )

                item, next_cursor = _unpack(spec, pair)
                try:
                    job.each_iteration(item, params)
                except Exception as e:
                    log.error("each_iteration failed", cursor=recorded, error=str(e), error_type=type(e).__name__)
                    return IterationOutcome.failed(
                        e, cursor=recorded, iterations=iterations, elapsed_seconds=self._elapsed(started_at)
                    )
                iterations += 1

                self._policy.enforce(next_cursor, spec.name)
                recorded = next_cursor

                if predicate():
                    reason = limits.triggered if limits is not None and limits.triggered is not None else StopReason.REQUESTED
                    _call_hook(job, "on_shutdown", params, recorded)
                    log.info("iteration slice interrupted", cursor=recorded, iterations=iterations, reason=str(reason))
                    return IterationOutcome.interrupted(
                        recorded,
                        stop_reason=reason,
                        iterations=iterations,
                        elapsed_seconds=self._elapsed(started_at),
                    )
        finally:
            _close(iterator)

        _call_hook(job, "on_complete", params)
        log.info("iteration slice completed", iterations=iterations)
        return IterationOutcome.completed(iterations=iterations, elapsed_seconds=self._elapsed(started_at))

    def _elapsed(self, started_at: float) -> float:
        return self._clock.monotonic() - started_at


def _unpack(spec: JobSpec, pair: Any) -> tuple[Any, Any]:
    if not isinstance(pair, tuple | list) or len(pair) != 2:
        raise JobContractError(
            spec.name,
            "build_enumerator",
            f"must yield (item, cursor) pairs, got {type(pair).__name__}: {pair!r}",
        )
    return pair[0], pair[1]


def _call_hook(job: Any, hook: str, *args: Any) -> None:
    # Lifecycle hooks are optional for jobs that don't subclass IterationJob
    fn = getattr(job, hook, None)
    if fn is not None:
        fn(*args)


def _close(iterator: Iterator[Any]) -> None:
    # Generators hold open files/connections until closed
    close = getattr(iterator, "close", None)
    if callable(close):
        close()
