# src/resumer/enumerators/paged.py
"""Paged sources: ordered collections fetched one page at a time.

A paged source is addressed by a monotonic ordering key, never by offset.
``fetch_page(after, limit)`` returns up to ``limit`` (key, item) pairs whose
keys sort strictly after ``after``. Rows inserted or deleted between pages
therefore never shift the resumption position.

Implementations:
- SqlKeysetSource: keyset pagination over a SQLAlchemy table or select
- InMemoryPagedSource: records held in a mapping keyed by ordering key
"""

from __future__ import annotations

import bisect
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import Select, Table, and_, select, tuple_

from resumer.contracts.errors import ArgumentError, CursorShapeError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine, RowMapping
    from sqlalchemy.sql.elements import ColumnElement


@runtime_checkable
class PagedSource(Protocol):
    """Protocol for ordered, resumable, paged collections."""

    def fetch_page(self, after: Any, limit: int) -> Sequence[tuple[Any, Any]]:
        """Return up to ``limit`` (key, item) pairs with key > ``after``.

        ``after`` is None for the first page. Pairs are in ascending key order.
        """
        ...

    def check_cursor(self, cursor: Any) -> None:
        """Raise CursorShapeError if ``cursor`` cannot be an ordering key here."""
        ...


class SqlKeysetSource:
    """Keyset pagination over a SQLAlchemy table.

    Each page is ``SELECT ... WHERE (order cols) > (after) ORDER BY (order cols)
    LIMIT n``, so fetching page N never re-scans pages 0..N-1. Composite
    ordering keys are represented as lists (JSON friendly cursors).

    Example:
        source = SqlKeysetSource(engine, products_table, order_by="id")
        builder.build_over_paged_source(source, cursor=last_id)
    """

    def __init__(
        self,
        engine: Engine,
        table: Table,
        order_by: str | Sequence[str] = "id",
        *,
        where: ColumnElement[bool] | None = None,
        row_mapper: Callable[[RowMapping], Any] | None = None,
    ) -> None:
        columns = [order_by] if isinstance(order_by, str) else list(order_by)
        if not columns:
            raise ArgumentError("order_by must name at least one column")
        missing = [name for name in columns if name not in table.c]
        if missing:
            raise ArgumentError(f"order_by columns not in table {table.name}: {missing}")
        self._engine = engine
        self._table = table
        self._order_names = columns
        self._order_columns = [table.c[name] for name in columns]
        self._key_types = [_column_python_type(column) for column in self._order_columns]
        self._where = where
        self._row_mapper = row_mapper if row_mapper is not None else dict

    @property
    def composite(self) -> bool:
        return len(self._order_columns) > 1

    def check_cursor(self, cursor: Any) -> None:
        if cursor is None:
            return
        source = f"{self._table.name} keyset"
        if self.composite:
            if not isinstance(cursor, list | tuple) or len(cursor) != len(self._order_columns):
                raise CursorShapeError(
                    source,
                    cursor,
                    f"a list of {len(self._order_columns)} values ({', '.join(self._order_names)})",
                )
            values = list(cursor)
        elif isinstance(cursor, list | tuple | dict):
            raise CursorShapeError(source, cursor, f"a scalar {self._order_names[0]} value")
        else:
            values = [cursor]
        # Each key value must have its column's Python type
        for name, key_type, value in zip(self._order_names, self._key_types, values, strict=True):
            if key_type is not None and not _key_matches(value, key_type):
                raise CursorShapeError(source, cursor, f"{name} values of type {key_type.__name__}")

    def _statement(self, after: Any, limit: int) -> Select[Any]:
        stmt = select(self._table)
        conditions: list[ColumnElement[bool]] = []
        if self._where is not None:
            conditions.append(self._where)
        if after is not None:
            if self.composite:
                conditions.append(tuple_(*self._order_columns) > tuple_(*after))
            else:
                conditions.append(self._order_columns[0] > after)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        return stmt.order_by(*self._order_columns).limit(limit)

    def _key(self, row: RowMapping) -> Any:
        if self.composite:
            return [row[name] for name in self._order_names]
        return row[self._order_names[0]]

    def fetch_page(self, after: Any, limit: int) -> list[tuple[Any, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(self._statement(after, limit)).mappings().all()
        return [(self._key(row), self._row_mapper(row)) for row in rows]


def _column_python_type(column: ColumnElement[Any]) -> type | None:
    try:
        return column.type.python_type
    except NotImplementedError:
        # Custom or dialect-specific types: the database is the only judge
        return None


def _key_matches(value: Any, key_type: type) -> bool:
    # Exact types, as for index cursors: True is not an integer key
    if type(value) is key_type:
        return True
    return key_type in (float, Decimal) and type(value) in (int, float)


class InMemoryPagedSource:
    """Paged view over a live mapping of ordering key -> record.

    The mapping is re-read on every fetch, so records added or removed between
    pages are seen (or not) exactly as with a database table.
    """

    def __init__(self, records: Mapping[Any, Any]) -> None:
        self._records = records

    def check_cursor(self, cursor: Any) -> None:
        if cursor is None or not self._records:
            return
        sample = next(iter(self._records))
        if type(cursor) is not type(sample):
            raise CursorShapeError("in-memory keyset", cursor, f"a {type(sample).__name__} key")

    def fetch_page(self, after: Any, limit: int) -> list[tuple[Any, Any]]:
        keys = sorted(self._records)
        start = 0 if after is None else bisect.bisect_right(keys, after)
        return [(key, self._records[key]) for key in keys[start : start + limit]]
