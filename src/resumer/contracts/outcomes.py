"""Iteration outcome contract.

IterationOutcome is produced by IterationRunner and consumed by the host queue:
- COMPLETED: the iterator was exhausted, the job is done
- INTERRUPTED: the slice stopped early; re-enqueue with ``cursor``
- FAILED: each_iteration (or the source) raised; ``cursor`` is the last
  successfully recorded resumption point, so the failing item is reprocessed
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from resumer.contracts.enums import OutcomeStatus, StopReason


@dataclass(frozen=True)
class IterationOutcome:
    """Result of running one iteration slice.

    Use the completed()/interrupted()/failed() constructors; __post_init__
    rejects combinations that cannot occur.
    """

    status: OutcomeStatus
    cursor: Any = None
    error: BaseException | None = None
    iterations: int = 0
    stop_reason: StopReason | None = None
    elapsed_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        if self.status == OutcomeStatus.FAILED:
            if self.error is None:
                raise ValueError("failed outcome must carry the error")
        elif self.error is not None:
            raise ValueError(f"{self.status} outcome must not carry an error")
        if self.status == OutcomeStatus.INTERRUPTED:
            if self.stop_reason is None:
                raise ValueError("interrupted outcome must have a stop_reason")
        elif self.stop_reason is not None:
            raise ValueError(f"{self.status} outcome must not have a stop_reason")
        if self.status == OutcomeStatus.COMPLETED and self.cursor is not None:
            raise ValueError("completed outcome has no resumption cursor")

    @classmethod
    def completed(cls, *, iterations: int = 0, elapsed_seconds: float = 0.0) -> IterationOutcome:
        return cls(OutcomeStatus.COMPLETED, iterations=iterations, elapsed_seconds=elapsed_seconds)

    @classmethod
    def interrupted(
        cls,
        cursor: Any,
        *,
        stop_reason: StopReason = StopReason.REQUESTED,
        iterations: int = 0,
        elapsed_seconds: float = 0.0,
    ) -> IterationOutcome:
        return cls(
            OutcomeStatus.INTERRUPTED,
            cursor=cursor,
            stop_reason=stop_reason,
            iterations=iterations,
            elapsed_seconds=elapsed_seconds,
        )

    @classmethod
    def failed(
        cls,
        error: BaseException,
        *,
        cursor: Any = None,
        iterations: int = 0,
        elapsed_seconds: float = 0.0,
    ) -> IterationOutcome:
        return cls(
            OutcomeStatus.FAILED,
            cursor=cursor,
            error=error,
            iterations=iterations,
            elapsed_seconds=elapsed_seconds,
        )

    @property
    def should_reenqueue(self) -> bool:
        """True when the host queue should re-enqueue the job with ``cursor``."""
        return self.status == OutcomeStatus.INTERRUPTED

    @property
    def is_done(self) -> bool:
        return self.status == OutcomeStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for JSON output (the error is rendered as text)."""
        return {
            "status": str(self.status),
            "cursor": self.cursor,
            "iterations": self.iterations,
            "stop_reason": str(self.stop_reason) if self.stop_reason is not None else None,
            "elapsed_seconds": self.elapsed_seconds,
            "error": None if self.error is None else {"type": type(self.error).__name__, "exception": str(self.error)},
        }
