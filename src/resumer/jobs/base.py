# src/resumer/jobs/base.py
"""Base class for iteration jobs.

IterationJob deliberately does NOT define build_enumerator or each_iteration:
a subclass that forgets one must fail contract validation, not inherit a stub.
"""

from typing import Any

from resumer.enumerators import EnumeratorBuilder


class IterationJob:
    """Convenience base class: builder access and no-op lifecycle hooks.

    Subclasses implement:
        build_enumerator(self, params, *, cursor) -> iterable of (item, cursor)
        each_iteration(self, item, params) -> None

    Optional ``name`` class attribute; defaults to the class's qualified name.
    """

    _enumerator_builder: EnumeratorBuilder | None = None

    @property
    def enumerator_builder(self) -> EnumeratorBuilder:
        if self._enumerator_builder is None:
            self._enumerator_builder = EnumeratorBuilder()
        return self._enumerator_builder

    def on_start(self, params: Any) -> None:
        """Called before the first slice (no starting cursor)."""

    def on_resume(self, params: Any, cursor: Any) -> None:
        """Called before a slice that resumes from ``cursor``."""

    def on_shutdown(self, params: Any, cursor: Any) -> None:
        """Called when a slice is interrupted; ``cursor`` is the resumption point."""

    def on_complete(self, params: Any) -> None:
        """Called once the iterator is exhausted."""
