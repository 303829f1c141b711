# src/resumer/jobs/protocols.py
"""Protocol for iteration jobs.

Used for type checking only. Runtime enforcement is contract validation
(resumer.jobs.contract), which also inspects the cursor parameter kind, something
a Protocol cannot express.
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IterationJobProtocol(Protocol):
    """A job that processes a resumable sequence of items.

    Example:
        class BackfillJob(IterationJob):
            def build_enumerator(self, params, *, cursor):
                return self.enumerator_builder.build_times(params["count"], cursor=cursor)

            def each_iteration(self, item, params):
                backfill(item)
    """

    def build_enumerator(self, params: Any, *, cursor: Any) -> Iterable[tuple[Any, Any]] | None:
        """Return the (item, cursor) sequence, resumed after ``cursor``."""
        ...

    def each_iteration(self, item: Any, params: Any) -> None:
        """Process one item."""
        ...
