# src/resumer/enumerators/builder.py
"""EnumeratorBuilder: resumable lazy sequences of (item, cursor) pairs.

Every build_* method validates its starting cursor EAGERLY, raising
CursorShapeError before any item is produced, and returns a lazy iterator.
Resuming with the cursor yielded alongside item N continues at item N+1.

Example:
    class ProductJob(IterationJob):
        def build_enumerator(self, params, *, cursor):
            return self.enumerator_builder.build_over_paged_source(
                SqlKeysetSource(engine, products, order_by="id"),
                cursor=cursor,
            )
"""

from __future__ import annotations

import csv
from collections.abc import Iterator, Mapping, Sequence, Set
from pathlib import Path
from typing import Any

from resumer.contracts.errors import ArgumentError, CursorShapeError
from resumer.enumerators.nested import LevelBuilder, NestedIterator
from resumer.enumerators.paged import PagedSource

DEFAULT_BATCH_SIZE = 100


def _check_index_cursor(source: str, cursor: Any) -> None:
    # bool is an int subclass but never a valid position
    if cursor is None:
        return
    if type(cursor) is not int or cursor < 0:
        raise CursorShapeError(source, cursor, "None or a non-negative integer")


def _check_batch_size(batch_size: int) -> None:
    if type(batch_size) is not int or batch_size < 1:
        raise ArgumentError(f"batch_size must be a positive integer, got {batch_size!r}")


class EnumeratorBuilder:
    """Builds resumable iterators for the source shapes jobs commonly use."""

    def build_once(self, *, cursor: Any = None) -> Iterator[tuple[None, int]]:
        """Yield a single (None, 0) pair, or nothing when resuming."""
        _check_index_cursor("once", cursor)
        return iter([] if cursor is not None else [(None, 0)])

    def build_times(self, count: int, *, cursor: Any = None) -> Iterator[tuple[int, int]]:
        """Yield integers 0..count-1; the cursor is the integer just yielded."""
        if type(count) is not int or count < 0:
            raise ArgumentError(f"count must be a non-negative integer, got {count!r}")
        _check_index_cursor("times", cursor)
        start = 0 if cursor is None else cursor + 1
        return ((i, i) for i in range(start, count))

    def build_over_collection(self, collection: Sequence[Any] | Mapping[Any, Any], *, cursor: Any = None) -> Iterator[tuple[Any, Any]]:
        """Yield elements of an ordered collection.

        Sequences are addressed by index (cursor = index of the element just
        yielded). Mappings are addressed by key in iteration order, yielding
        (value, key).

        Raises:
            ArgumentError: For unordered collections (sets) and strings
            CursorShapeError: If the cursor is not a valid index/key
        """
        if isinstance(collection, Mapping):
            return self._iterate_mapping(collection, cursor)
        if isinstance(collection, Set) or isinstance(collection, str | bytes):
            raise ArgumentError(f"{type(collection).__name__} has no stable order to resume from")
        if not isinstance(collection, Sequence):
            raise ArgumentError(f"Expected a sequence or mapping, got {type(collection).__name__}")
        _check_index_cursor("collection", cursor)
        start = 0 if cursor is None else cursor + 1
        size = len(collection)
        return ((collection[i], i) for i in range(start, size))

    def _iterate_mapping(self, mapping: Mapping[Any, Any], cursor: Any) -> Iterator[tuple[Any, Any]]:
        keys = list(mapping)
        start = 0
        if cursor is not None:
            try:
                start = keys.index(cursor) + 1
            except ValueError:
                raise CursorShapeError("mapping", cursor, "None or a key of the mapping") from None
        return ((mapping[key], key) for key in keys[start:])

    def build_over_paged_source(
        self,
        source: PagedSource,
        *,
        cursor: Any = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> Iterator[tuple[Any, Any]]:
        """Yield records one at a time; the cursor is the record's ordering key.

        At most one page is held in memory. The next page is fetched only
        after every record of the current page has been handed out.
        """
        _check_batch_size(batch_size)
        source.check_cursor(cursor)
        return (
            (item, key)
            for page in _iterate_pages(source, cursor, batch_size)
            for key, item in page
        )

    def build_batches_over_paged_source(
        self,
        source: PagedSource,
        *,
        cursor: Any = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> Iterator[tuple[list[Any], Any]]:
        """Yield whole pages as items; the cursor is the last key of the page."""
        _check_batch_size(batch_size)
        source.check_cursor(cursor)
        return (
            ([item for _, item in page], page[-1][0])
            for page in _iterate_pages(source, cursor, batch_size)
        )

    def build_nested(
        self,
        outer_builder: LevelBuilder,
        inner_builder: LevelBuilder,
        *deeper_builders: LevelBuilder,
        cursor: Any = None,
    ) -> NestedIterator:
        """Compose resumable sequences; see resumer.enumerators.nested.

        Example:
            builder.build_nested(
                lambda cursor: builder.build_over_collection(shops, cursor=cursor),
                lambda shop, cursor: builder.build_over_collection(shop.products, cursor=cursor),
                cursor=cursor,
            )
        """
        return NestedIterator([outer_builder, inner_builder, *deeper_builders], cursor)

    def build_over_csv(self, path: str | Path, *, cursor: Any = None) -> Iterator[tuple[dict[str, str], int]]:
        """Yield CSV rows as dicts keyed by header; the cursor is the row index."""
        _check_index_cursor("csv", cursor)
        start = 0 if cursor is None else cursor + 1
        return _iterate_csv(Path(path), start)


def _iterate_pages(source: PagedSource, after: Any, batch_size: int) -> Iterator[Sequence[tuple[Any, Any]]]:
    while True:
        page = source.fetch_page(after, batch_size)
        if not page:
            return
        yield page
        if len(page) < batch_size:
            return
        after = page[-1][0]


def _iterate_csv(path: Path, start: int) -> Iterator[tuple[dict[str, str], int]]:
    with path.open(newline="", encoding="utf-8") as f:
        for index, row in enumerate(csv.DictReader(f)):
            if index >= start:
                yield row, index
