# src/resumer/enumerators/nested.py
"""Nested iteration over several resumable sequences.

Each level is a builder function taking the items of every enclosing level
plus its own cursor (as keyword) and returning an iterator of (item, cursor).
The combined cursor is a list with one entry per level.

An enclosing level's cursor advances only after its inner sequence is
exhausted. Until then it still points BEFORE the current outer item, so
resuming rebuilds the outer sequence at that same item and re-enters the inner
sequence at the stored inner cursor:

    [None, 1]  ->  outer restarts at its first item, inner resumes after 1
    [0, None]  ->  outer item 0 finished, outer resumes at item 1 from scratch
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from resumer.contracts.errors import CursorShapeError

LevelBuilder = Callable[..., Iterable[tuple[Any, Any]]]


class NestedIterator:
    """Iterator yielding (innermost item, [cursor per level])."""

    def __init__(self, builders: list[LevelBuilder], cursor: Any = None) -> None:
        if cursor is None:
            cursors: list[Any] = [None] * len(builders)
        elif isinstance(cursor, list | tuple) and len(cursor) == len(builders):
            cursors = list(cursor)
        else:
            raise CursorShapeError("nested", cursor, f"None or a list of {len(builders)} cursors")
        self._builders = builders
        self._cursors = cursors
        # Built eagerly so the outermost cursor is validated at build time
        self._outer = iter(builders[0](cursor=cursors[0]))
        self._iterator = self._iterate_outer()

    def __iter__(self) -> Iterator[tuple[Any, list[Any]]]:
        return self

    def __next__(self) -> tuple[Any, list[Any]]:
        return next(self._iterator)

    def close(self) -> None:
        self._iterator.close()
        # An unstarted generator never reaches its finally block
        _close_iterator(self._outer)

    def _iterate_outer(self) -> Iterator[tuple[Any, list[Any]]]:
        yield from self._iterate_level(self._outer, [], 0)

    def _iterate_level(
        self,
        iterator: Iterator[tuple[Any, Any]],
        enclosing: list[Any],
        level: int,
    ) -> Iterator[tuple[Any, list[Any]]]:
        innermost = level == len(self._builders) - 1
        try:
            for item, item_cursor in iterator:
                if innermost:
                    self._cursors[level] = item_cursor
                    yield item, list(self._cursors)
                    continue
                items = [*enclosing, item]
                inner = iter(self._builders[level + 1](*items, cursor=self._cursors[level + 1]))
                yield from self._iterate_level(inner, items, level + 1)
                # Next outer item starts its inner sequence from scratch
                self._cursors[level + 1] = None
                self._cursors[level] = item_cursor
        finally:
            _close_iterator(iterator)


def _close_iterator(iterator: Iterator[Any]) -> None:
    close = getattr(iterator, "close", None)
    if callable(close):
        close()
