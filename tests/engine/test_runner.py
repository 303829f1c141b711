"""Tests for IterationRunner: one execution slice of a job."""

import datetime
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import pytest

from resumer.contracts import (
    CursorSerializationError,
    CursorShapeError,
    JobContractError,
    OutcomeStatus,
    StopReason,
)
from resumer.core.cursor import CursorPolicy, DeprecationState
from resumer.contracts.enums import DeprecationMode
from resumer.engine import IterationRunner, SliceLimits
from resumer.jobs import IterationJob, JobRegistry


class TwoItemJob(IterationJob):
    """Iterates ["a", "b"] by index and records what it processed."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.processed: list[str] = []
        self.fail_on = fail_on

    def build_enumerator(self, params: Any, *, cursor: Any) -> Iterator[tuple[str, int]]:
        return self.enumerator_builder.build_over_collection(["a", "b"], cursor=cursor)

    def each_iteration(self, item: str, params: Any) -> None:
        if item == self.fail_on:
            raise RuntimeError(f"cannot process {item}")
        self.processed.append(item)


class HookJob(IterationJob):
    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []

    def build_enumerator(self, params: Any, *, cursor: Any) -> Iterator[tuple[int, int]]:
        return self.enumerator_builder.build_times(3, cursor=cursor)

    def each_iteration(self, item: int, params: Any) -> None:
        self.events.append(("item", item))

    def on_start(self, params: Any) -> None:
        self.events.append(("start", params))

    def on_resume(self, params: Any, cursor: Any) -> None:
        self.events.append(("resume", cursor))

    def on_shutdown(self, params: Any, cursor: Any) -> None:
        self.events.append(("shutdown", cursor))

    def on_complete(self, params: Any) -> None:
        self.events.append(("complete",))


class PlainJob:
    """Satisfies the contract without subclassing IterationJob (no hooks)."""

    def build_enumerator(self, params, *, cursor):
        return [("x", 0)]

    def each_iteration(self, item, params):
        pass


class CursorJob(IterationJob):
    """Yields a single item with whatever cursor it was configured with."""

    def __init__(self, cursor_value: Any) -> None:
        self.cursor_value = cursor_value

    def build_enumerator(self, params: Any, *, cursor: Any) -> list[tuple[str, Any]]:
        return [("item", self.cursor_value)]

    def each_iteration(self, item: Any, params: Any) -> None:
        pass


class Color(Enum):
    RED = "red"


@dataclass(frozen=True)
class Position:
    page: int


class Token(str):
    pass


def stop_after(n: int) -> Any:
    calls = {"count": 0}

    def should_stop() -> bool:
        calls["count"] += 1
        return calls["count"] >= n

    return should_stop


class TestRunToCompletion:
    def test_two_items_complete(self, runner: IterationRunner) -> None:
        """No stop requested: both items processed, Completed."""
        job = TwoItemJob()

        outcome = runner.run(job, {})

        assert job.processed == ["a", "b"]
        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.cursor is None
        assert outcome.iterations == 2
        assert outcome.is_done

    def test_empty_enumerator_completes(self, runner: IterationRunner) -> None:
        job = TwoItemJob()

        outcome = runner.run(job, {}, cursor=1)

        assert job.processed == []
        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.iterations == 0

    def test_none_enumerator_completes_without_iterating(self, runner: IterationRunner) -> None:
        class NothingJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return None

            def each_iteration(self, item, params):
                raise AssertionError("must not be called")

        outcome = runner.run(NothingJob(), {})

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.iterations == 0

    def test_job_without_hooks(self, runner: IterationRunner) -> None:
        outcome = runner.run(PlainJob(), {})

        assert outcome.status == OutcomeStatus.COMPLETED
        assert outcome.iterations == 1

    def test_params_passed_to_both_operations(self, runner: IterationRunner) -> None:
        seen: list[Any] = []

        class ParamsJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                seen.append(("build", params, cursor))
                return self.enumerator_builder.build_once(cursor=cursor)

            def each_iteration(self, item, params):
                seen.append(("each", item, params))

        runner.run(ParamsJob(), {"shop": 7})

        assert seen == [("build", {"shop": 7}, None), ("each", None, {"shop": 7})]


class TestInterruption:
    def test_stop_after_first_item(self, runner: IterationRunner) -> None:
        """Stop requested after item 0: Interrupted(0); resuming processes only item 1."""
        first = TwoItemJob()

        outcome = runner.run(first, {}, should_stop=lambda: True)

        assert first.processed == ["a"]
        assert outcome.status == OutcomeStatus.INTERRUPTED
        assert outcome.cursor == 0
        assert outcome.stop_reason == StopReason.REQUESTED
        assert outcome.should_reenqueue

        second = TwoItemJob()
        resumed = runner.run(second, {}, cursor=outcome.cursor)

        assert second.processed == ["b"]
        assert resumed.status == OutcomeStatus.COMPLETED

    def test_stop_checked_after_each_completed_item(self, runner: IterationRunner) -> None:
        job = HookJob()

        outcome = runner.run(job, {}, should_stop=stop_after(2))

        assert [e for e in job.events if e[0] == "item"] == [("item", 0), ("item", 1)]
        assert outcome.cursor == 1
        assert outcome.iterations == 2

    def test_no_item_pulled_after_stop(self, runner: IterationRunner) -> None:
        pulled: list[int] = []

        class GeneratorJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                for i in range(5):
                    pulled.append(i)
                    yield i, i

            def each_iteration(self, item, params):
                pass

        runner.run(GeneratorJob(), {}, should_stop=lambda: True)

        assert pulled == [0]

    def test_stop_on_last_item_is_interrupted(self, runner: IterationRunner) -> None:
        """The runner does not look ahead to see whether the sequence is exhausted."""
        outcome = runner.run(TwoItemJob(), {}, should_stop=stop_after(2))

        assert outcome.status == OutcomeStatus.INTERRUPTED
        assert outcome.cursor == 1
        assert runner.run(TwoItemJob(), {}, cursor=1).iterations == 0

    def test_slice_limits_report_reason(self, runner: IterationRunner) -> None:
        limits = SliceLimits(max_iterations=2)

        outcome = runner.run(HookJob(), {}, should_stop=limits)

        assert outcome.stop_reason == StopReason.MAX_ITERATIONS
        assert outcome.cursor == 1

    def test_slice_limits_runtime_budget(
        self, registry: JobRegistry, deprecation: DeprecationState, clock: Any
    ) -> None:

        class SlowJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return self.enumerator_builder.build_times(10, cursor=cursor)

            def each_iteration(self, item, params):
                clock.advance(1.0)

        runner = IterationRunner(registry=registry, deprecation=deprecation, clock=clock)
        outcome = runner.run(SlowJob(), {}, should_stop=SliceLimits(max_runtime_seconds=3.0, clock=clock))

        assert outcome.stop_reason == StopReason.MAX_RUNTIME
        assert outcome.cursor == 2
        assert outcome.iterations == 3
        assert outcome.elapsed_seconds == 3.0

    def test_slice_limits_reused_across_slices(self, runner: IterationRunner) -> None:
        limits = SliceLimits(max_iterations=1)

        first = runner.run(HookJob(), {}, should_stop=limits)
        second = runner.run(HookJob(), {}, cursor=first.cursor, should_stop=limits)

        assert (first.cursor, second.cursor) == (0, 1)


class TestLifecycleHooks:
    def test_fresh_run(self, runner: IterationRunner) -> None:
        job = HookJob()

        runner.run(job, {"p": 1})

        assert job.events == [("start", {"p": 1}), ("item", 0), ("item", 1), ("item", 2), ("complete",)]

    def test_resume_and_shutdown(self, runner: IterationRunner) -> None:
        job = HookJob()

        runner.run(job, {}, cursor=0, should_stop=lambda: True)

        assert job.events == [("resume", 0), ("item", 1), ("shutdown", 1)]

    def test_failure_skips_completion_hook(self, runner: IterationRunner) -> None:
        class FailingHookJob(HookJob):
            def each_iteration(self, item, params):
                raise RuntimeError("boom")

        job = FailingHookJob()
        runner.run(job, {})

        assert job.events == [("start", {})]


class TestFailure:
    def test_error_on_second_item(self, runner: IterationRunner) -> None:
        """each_iteration raises on item 1: Failed carries cursor 0, the last recorded one."""
        job = TwoItemJob(fail_on="b")

        outcome = runner.run(job, {})

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.cursor == 0
        assert isinstance(outcome.error, RuntimeError)
        assert str(outcome.error) == "cannot process b"
        assert outcome.iterations == 1
        assert not outcome.should_reenqueue

    def test_error_on_first_item_keeps_starting_cursor(self, runner: IterationRunner) -> None:
        assert runner.run(TwoItemJob(fail_on="a"), {}).cursor is None

        resumed = runner.run(TwoItemJob(fail_on="b"), {}, cursor=0)
        assert resumed.status == OutcomeStatus.FAILED
        assert resumed.cursor == 0

    def test_failed_item_is_reprocessed_on_retry(self, runner: IterationRunner) -> None:
        failed = runner.run(TwoItemJob(fail_on="b"), {})
        retry = TwoItemJob()

        runner.run(retry, {}, cursor=failed.cursor)

        assert retry.processed == ["b"]

    def test_source_error_is_failed(self, runner: IterationRunner) -> None:
        class BrokenSourceJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                yield "a", 0
                raise ConnectionError("database went away")

            def each_iteration(self, item, params):
                pass

        outcome = runner.run(BrokenSourceJob(), {})

        assert outcome.status == OutcomeStatus.FAILED
        assert isinstance(outcome.error, ConnectionError)
        assert outcome.cursor == 0


class TestArgumentErrors:
    def test_contract_violation_raises(self, runner: IterationRunner) -> None:
        class PositionalCursorJob:
            def build_enumerator(self, params, cursor):
                return []

            def each_iteration(self, item, params):
                pass

        with pytest.raises(JobContractError, match="keyword-only"):
            runner.run(PositionalCursorJob(), {})

    def test_bad_starting_cursor_raises(self, runner: IterationRunner) -> None:
        with pytest.raises(CursorShapeError, match="collection cursor"):
            runner.run(TwoItemJob(), {}, cursor="not-an-index")

    def test_non_iterable_enumerator_raises(self, runner: IterationRunner) -> None:
        class NumberJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return 42

            def each_iteration(self, item, params):
                pass

        with pytest.raises(JobContractError, match="must return an iterable"):
            runner.run(NumberJob(), {})

    @pytest.mark.parametrize("pair", ["ab", ("a",), ("a", 0, "extra"), 7])
    def test_malformed_pair_raises(self, runner: IterationRunner, pair: Any) -> None:
        class BadPairJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return [pair]

            def each_iteration(self, item, params):
                pass

        with pytest.raises(JobContractError, match="pairs"):
            runner.run(BadPairJob(), {})

    def test_lazy_cursor_shape_error_raises(self, runner: IterationRunner) -> None:
        """An ArgumentError raised while pulling is not converted to Failed."""

        class LazyJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                yield from self.enumerator_builder.build_times(3, cursor=cursor)

            def each_iteration(self, item, params):
                pass

        with pytest.raises(CursorShapeError):
            runner.run(LazyJob(), {}, cursor=-5)

    def test_policy_and_deprecation_are_exclusive(self, deprecation: DeprecationState) -> None:
        with pytest.raises(ValueError, match="not both"):
            IterationRunner(policy=CursorPolicy(deprecation), deprecation=deprecation)


class TestCursorPolicy:
    @pytest.mark.parametrize(
        "cursor",
        [
            datetime.datetime(2024, 1, 1, 12, 0),
            Color.RED,
            Position(page=3),
            Token("abc"),
            object(),
        ],
        ids=["datetime", "enum", "record", "str-subclass", "object"],
    )
    def test_non_primitive_cursor_warns_once_and_completes(
        self, runner: IterationRunner, notices: Any, cursor: Any
    ) -> None:
        outcome = runner.run(CursorJob(cursor), {})

        assert outcome.status == OutcomeStatus.COMPLETED
        assert len(notices) == 1
        assert "CursorJob.build_enumerator's iterator provided:" in notices.notices[0].message

    def test_notice_callstack_ends_at_run_caller(self, runner: IterationRunner, notices: Any) -> None:
        runner.run(CursorJob(Color.RED), {})

        assert notices.notices[0].callstack[-1].name == "test_notice_callstack_ends_at_run_caller"

    def test_nested_non_primitive_warns_once(self, runner: IterationRunner, notices: Any) -> None:
        cursor = {"at": datetime.date(2024, 1, 1), "tags": [Color.RED, Token("x")]}

        runner.run(CursorJob(cursor), {})

        assert len(notices) == 1

    def test_one_notice_per_step(self, runner: IterationRunner, notices: Any) -> None:
        class EnumCursorJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return [("a", Color.RED), ("b", Color.RED), ("c", Color.RED)]

            def each_iteration(self, item, params):
                pass

        runner.run(EnumCursorJob(), {})

        assert len(notices) == 3

    def test_complex_primitive_cursor_is_silent(self, runner: IterationRunner, notices: Any) -> None:
        cursor = {"shop": 7, "after": ["2024-01-01", 42], "done": False, "ratio": 0.5, "next": None}

        outcome = runner.run(CursorJob(cursor), {})

        assert outcome.status == OutcomeStatus.COMPLETED
        assert len(notices) == 0

    def test_interrupted_outcome_carries_non_primitive_cursor(
        self, runner: IterationRunner, notices: Any
    ) -> None:
        outcome = runner.run(CursorJob(Color.RED), {}, should_stop=lambda: True)

        assert outcome.cursor is Color.RED
        assert len(notices) == 1

    def test_strict_mode_raises(self, registry: JobRegistry, notices: Any) -> None:
        strict = DeprecationState(mode=DeprecationMode.RAISE, behavior=notices)
        job = CursorJob(Color.RED)

        with pytest.raises(CursorSerializationError) as exc_info:
            IterationRunner(registry=registry, deprecation=strict).run(job, {})

        assert exc_info.value.job_name == "CursorJob"
        assert exc_info.value.cursor is Color.RED
        assert len(notices) == 0


class TestIteratorCleanup:
    @pytest.mark.parametrize("should_stop", [None, "stop", "fail"])
    def test_generator_closed(self, runner: IterationRunner, should_stop: str | None) -> None:
        closed: list[bool] = []

        class ClosingJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                try:
                    yield "a", 0
                    yield "b", 1
                finally:
                    closed.append(True)

            def each_iteration(self, item, params):
                if should_stop == "fail":
                    raise RuntimeError("boom")

        runner.run(ClosingJob(), {}, should_stop=(lambda: True) if should_stop == "stop" else None)

        assert closed == [True]

    def test_contract_validated_once_per_type(self, registry: JobRegistry, runner: IterationRunner) -> None:
        runner.run(TwoItemJob(), {})
        runner.run(TwoItemJob(), {}, cursor=0)

        assert registry.ensure(TwoItemJob) is registry.ensure(TwoItemJob)
        assert not registry.is_registered(TwoItemJob)
